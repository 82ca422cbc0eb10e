"""
Pytest configuration and shared fixtures for the outfit planner tests.
"""
import itertools
import random
from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from outfit_planner.core.exceptions import RecommenderError
from outfit_planner.database import get_db
from outfit_planner.models import Base, Outfit as OutfitModel, WardrobeItem as WardrobeItemModel
from outfit_planner.reco.recommender import DaySuggestion, Recommender, SuggestedItem, get_recommender
from outfit_planner.store import SQLOutfitStore

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)
TODAY = date(2024, 5, 6)


# ============================================================================
# Fakes
# ============================================================================

class ScriptedRecommender(Recommender):
    """Recommender that replays scripted answers, one per call.

    Each script entry is a list of suggestions, a single suggestion, or an
    exception to raise. Calls past the end of the script fail.
    """

    def __init__(self, script=None):
        self.script = list(script or [])
        self.calls = []

    def recommend(self, persona, days, wardrobe, existing_outfits, rules):
        self.calls.append({
            "persona": persona,
            "days": days,
            "wardrobe": wardrobe,
            "existing_outfits": existing_outfits,
            "rules": rules,
        })
        if not self.script:
            raise RecommenderError("no scripted response left")
        answer = self.script.pop(0)
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, DaySuggestion):
            return [answer]
        return answer


def make_suggestion(*item_ids, date=None, notes=None, claim=None):
    return DaySuggestion(
        date=date,
        items=[SuggestedItem(item_id=i, reason=f"{i} fits the day") for i in item_ids],
        use_existing_outfit_id=claim,
        notes=notes,
    )


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(autoflush=False, bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def store(db_session):
    return SQLOutfitStore(db_session)


@pytest.fixture
def make_item(db_session):
    """Factory for tagged wardrobe items. Earlier items are newer."""
    counter = itertools.count()

    def _make(item_id, category, name=None, colors=None, **extra_tags):
        tags = {
            "item_name": name or item_id.title(),
            "broad_category": category,
            "colors": colors if colors is not None else ["black"],
            **extra_tags,
        }
        db_session.add(WardrobeItemModel(
            id=item_id,
            tags=tags,
            image_url=f"https://images.example.com/{item_id}.png",
            created_at=BASE_TIME - timedelta(minutes=next(counter)),
        ))
        db_session.commit()
        return item_id

    return _make


@pytest.fixture
def make_outfit(db_session):
    """Factory for saved outfits. Earlier outfits come first in store snapshots."""
    counter = itertools.count()

    def _make(outfit_id, item_ids, name=None, notes=None, tags=None):
        db_session.add(OutfitModel(
            id=outfit_id,
            item_ids=list(item_ids),
            name=name,
            notes=notes,
            tags=tags,
            created_at=BASE_TIME - timedelta(minutes=next(counter)),
        ))
        db_session.commit()
        return outfit_id

    return _make


@pytest.fixture
def outfit_count(db_session):
    return lambda: db_session.query(OutfitModel).count()


@pytest.fixture
def basic_wardrobe(make_item):
    """top1, bottom1 and shoe1"""
    make_item("top1", "top", name="White Tee", colors=["white"])
    make_item("bottom1", "bottom", name="Blue Jeans", colors=["blue"])
    make_item("shoe1", "shoes", name="Sneakers", colors=["white"])
    return ["top1", "bottom1", "shoe1"]


# ============================================================================
# Engine collaborators
# ============================================================================

@pytest.fixture
def suggest():
    return make_suggestion


@pytest.fixture
def recommender():
    return ScriptedRecommender()


@pytest.fixture
def rng():
    return random.Random(1234)


# ============================================================================
# API
# ============================================================================

@pytest.fixture
def client(db_session, recommender):
    from outfit_planner.main import app
    from outfit_planner.routers.stylist import get_rng

    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_recommender] = lambda: recommender
    app.dependency_overrides[get_rng] = lambda: random.Random(7)
    yield TestClient(app)
    app.dependency_overrides.clear()
