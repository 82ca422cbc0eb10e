"""
Pydantic schemas for the outfit planner API.

Import all schemas here for easy access.
"""
from .common import CamelModel, HealthResponse
from .wardrobe import (
    Category,
    WardrobeTags,
    ItemDisplay,
    WardrobeItem,
    WardrobeItemCreate,
    WardrobeListResponse,
)
from .outfit import (
    OutfitRecord,
    WeatherSnapshot,
    PlanningEvent,
    PlanningDay,
    OutfitItemView,
    OutfitView,
    PlannedOutfitView,
    SavedOutfitResponse,
    SavedOutfitListResponse,
    DailyOutfitRequest,
    DailyOutfitResponse,
    WeeklyPlanRequest,
    DayAssignment,
    WeeklyPlanResponse,
    RecommendRequest,
    SuggestedItemView,
    RecommendedDay,
    RecommendResponse,
)

__all__ = [
    # Common
    "CamelModel",
    "HealthResponse",
    # Wardrobe
    "Category",
    "WardrobeTags",
    "ItemDisplay",
    "WardrobeItem",
    "WardrobeItemCreate",
    "WardrobeListResponse",
    # Outfit
    "OutfitRecord",
    "WeatherSnapshot",
    "PlanningEvent",
    "PlanningDay",
    "OutfitItemView",
    "OutfitView",
    "PlannedOutfitView",
    "SavedOutfitResponse",
    "SavedOutfitListResponse",
    "DailyOutfitRequest",
    "DailyOutfitResponse",
    "WeeklyPlanRequest",
    "DayAssignment",
    "WeeklyPlanResponse",
    "RecommendRequest",
    "SuggestedItemView",
    "RecommendedDay",
    "RecommendResponse",
]
