"""
Generation fallback: ask the recommender for new item sets and materialize them
as outfit records, reusing an existing record whenever the fingerprint matches.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..config import settings
from ..core.exceptions import RecommenderError, ValidationError
from ..schemas import (
    OutfitRecord,
    PlanningDay,
    RecommendRequest,
    RecommendResponse,
    RecommendedDay,
    SuggestedItemView,
    WardrobeItem,
)
from ..store import OutfitStore
from ..utils.profiler import Profiler
from .fingerprint import OutfitIndex, canonicalize
from .recommender import DaySuggestion, Recommender

logger = logging.getLogger(__name__)

UNKNOWN_ITEM_POLICIES = ("drop", "reject")


@dataclass
class MaterializedOutfit:
    record: OutfitRecord
    reused: bool


def validate_suggestion(
    suggestion: DaySuggestion,
    known_ids: Iterable[str],
    policy: str = "drop",
) -> List[str]:
    """Item ids of a suggestion that are safe to persist.

    Duplicate ids collapse to their first occurrence. Ids missing from the
    wardrobe snapshot are dropped under the ``drop`` policy and fail the
    suggestion under ``reject``.
    """
    known = set(known_ids)
    ordered = list(dict.fromkeys(suggestion.item_ids))
    unknown = [i for i in ordered if i not in known]
    if unknown:
        if policy == "reject":
            raise RecommenderError(
                "suggestion references items outside the wardrobe",
                details={"unknown_item_ids": unknown},
            )
        logger.warning(f"Dropping {len(unknown)} unknown item ids from suggestion: {unknown}")
        ordered = [i for i in ordered if i in known]
    if not ordered:
        raise RecommenderError("suggestion has no usable wardrobe items")
    return ordered


class OutfitGenerator:
    """Recommender calls plus fingerprint-deduplicated persistence for one request.

    The wardrobe snapshot is loaded on first use and kept for the request.
    """

    def __init__(
        self,
        store: OutfitStore,
        recommender: Recommender,
        index: OutfitIndex,
        unknown_item_policy: Optional[str] = None,
        profiler: Optional[Profiler] = None,
    ):
        policy = (unknown_item_policy or settings.UNKNOWN_ITEM_POLICY).lower()
        if policy not in UNKNOWN_ITEM_POLICIES:
            raise ValueError(f"unknown item policy must be one of {UNKNOWN_ITEM_POLICIES}, got {policy!r}")
        self.store = store
        self.recommender = recommender
        self.index = index
        self.policy = policy
        self.profiler = profiler or Profiler()
        self._wardrobe: Optional[List[WardrobeItem]] = None

    @property
    def wardrobe(self) -> List[WardrobeItem]:
        if self._wardrobe is None:
            with self.profiler.measure("store_wardrobe_load"):
                self._wardrobe = self.store.list_items()
        return self._wardrobe

    def _wardrobe_payload(self) -> List[Dict[str, Any]]:
        return [
            {"id": item.id, "tags": item.tags.model_dump(exclude_none=True)}
            for item in self.wardrobe
        ]

    def _existing_payload(self) -> List[Dict[str, Any]]:
        return [{"id": r.id, "item_ids": r.item_ids} for r in self.index.records]

    def generate(
        self,
        days: List[PlanningDay],
        persona: Optional[Dict[str, Any]] = None,
        rules: Optional[Dict[str, Any]] = None,
    ) -> List[DaySuggestion]:
        with self.profiler.measure("recommender_call"):
            return self.recommender.recommend(
                persona or {},
                [day.context() for day in days],
                self._wardrobe_payload(),
                self._existing_payload(),
                rules or {},
            )

    def materialize(self, suggestion: DaySuggestion) -> MaterializedOutfit:
        """Resolve a suggestion to an outfit record, persisting only unseen sets."""
        item_ids = validate_suggestion(suggestion, (w.id for w in self.wardrobe), self.policy)
        fingerprint = canonicalize(item_ids)

        claimed = suggestion.use_existing_outfit_id
        if claimed:
            if self.index.fingerprint_of(claimed) == fingerprint:
                return MaterializedOutfit(record=self.index.get(claimed), reused=True)
            logger.warning(f"Ignoring claim that outfit {claimed} matches the suggested items")

        existing = self.index.find(fingerprint)
        if existing is not None:
            logger.info(f"Suggested items match saved outfit {existing.id}; reusing it")
            return MaterializedOutfit(record=existing, reused=True)

        with self.profiler.measure("store_insert"):
            record = self.store.insert_outfit(
                item_ids,
                tags=suggestion.tags,
                notes=suggestion.notes,
                name=suggestion.name,
            )
        self.index.add(record)
        return MaterializedOutfit(record=record, reused=False)

    def generate_one(
        self,
        day: PlanningDay,
        persona: Optional[Dict[str, Any]] = None,
        rules: Optional[Dict[str, Any]] = None,
    ) -> Tuple[DaySuggestion, MaterializedOutfit]:
        """Generate and materialize the outfit for a single day."""
        suggestions = self.generate([day], persona, rules)
        if not suggestions:
            raise RecommenderError(f"no suggestion returned for {day.date.isoformat()}")
        suggestion = suggestions[0]
        return suggestion, self.materialize(suggestion)


def recommend_outfits(
    store: OutfitStore,
    recommender: Recommender,
    request: RecommendRequest,
    unknown_item_policy: Optional[str] = None,
    profiler: Optional[Profiler] = None,
) -> RecommendResponse:
    """Multi-day recommendation: one recommender call, each day materialized.

    Days whose suggestion cannot be materialized are returned without an outfit id.
    """
    if not request.days:
        raise ValidationError("days[] is required", field="days")

    profiler = profiler or Profiler()
    with profiler.measure("store_snapshot"):
        index = OutfitIndex(store.list_outfits())
    generator = OutfitGenerator(store, recommender, index, unknown_item_policy, profiler)

    results = []
    for suggestion in generator.generate(request.days, request.persona, request.rules):
        outfit_id = None
        try:
            outfit_id = generator.materialize(suggestion).record.id
        except RecommenderError as exc:
            logger.warning(f"Suggestion for {suggestion.date or 'unknown date'} not saved: {exc.message}")
        results.append(
            RecommendedDay(
                date=suggestion.date,
                outfit_id=outfit_id,
                outfit=[SuggestedItemView(item_id=i.item_id, reason=i.reason) for i in suggestion.items],
                notes=suggestion.notes,
            )
        )
    return RecommendResponse(days=results)
