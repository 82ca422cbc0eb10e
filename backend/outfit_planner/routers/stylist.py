"""
Stylist endpoints: daily outfit, weekly plan and multi-day recommendations.
"""
import logging
import random

from fastapi import APIRouter, Depends

from ..reco.daily import DailySelector
from ..reco.generation import recommend_outfits
from ..reco.recommender import Recommender, get_recommender
from ..reco.weekly import plan_week
from ..schemas import (
    DailyOutfitRequest,
    DailyOutfitResponse,
    RecommendRequest,
    RecommendResponse,
    WeeklyPlanRequest,
    WeeklyPlanResponse,
)
from ..store import OutfitStore, get_store
from ..utils.profiler import Profiler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stylist", tags=["stylist"])


def get_rng() -> random.Random:
    """Random source for the daily pick; overridden with a seeded one in tests"""
    return random.Random()


@router.post("/daily", response_model=DailyOutfitResponse)
def daily_outfit(
    request: DailyOutfitRequest,
    store: OutfitStore = Depends(get_store),
    recommender: Recommender = Depends(get_recommender),
    rng: random.Random = Depends(get_rng),
):
    """Today's outfit, from saved outfits or freshly generated."""
    profiler = Profiler()
    logger.info(f"Daily outfit request: strategy={request.strategy}, tags={request.tags}")
    try:
        return DailySelector(store, recommender, rng=rng, profiler=profiler).select(request)
    finally:
        profiler.log_summary("[Daily] ")


@router.post("/weekly", response_model=WeeklyPlanResponse)
def weekly_plan(
    request: WeeklyPlanRequest,
    store: OutfitStore = Depends(get_store),
    recommender: Recommender = Depends(get_recommender),
):
    """
    One outfit per day across the horizon.
    Days that cannot be planned are missing from the response.
    """
    profiler = Profiler()
    try:
        return plan_week(store, recommender, request, profiler=profiler)
    finally:
        profiler.log_summary("[Weekly] ")


@router.post("/recommend", response_model=RecommendResponse)
def recommend(
    request: RecommendRequest,
    store: OutfitStore = Depends(get_store),
    recommender: Recommender = Depends(get_recommender),
):
    profiler = Profiler()
    logger.info(f"Recommendation request for {len(request.days)} days")
    try:
        return recommend_outfits(store, recommender, request, profiler=profiler)
    finally:
        profiler.log_summary("[Recommend] ")
