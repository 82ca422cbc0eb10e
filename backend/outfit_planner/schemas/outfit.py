"""
Outfit, planning and stylist request/response schemas.
"""
import datetime as dt
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .common import CamelModel
from .wardrobe import Category


class OutfitRecord(BaseModel):
    """Persisted outfit: a non-empty set of wardrobe item ids"""
    id: str
    item_ids: List[str]
    tags: Optional[Any] = None
    notes: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Planning context
# =============================================================================

class WeatherSnapshot(CamelModel):
    """Weather for one day; extra provider fields are passed through"""
    temperature: Optional[float] = None
    condition: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class PlanningEvent(CamelModel):
    title: Optional[str] = None
    dress_code: Optional[str] = Field(None, description="e.g. 'Business Casual'")
    time: Optional[str] = None


class PlanningDay(CamelModel):
    """One calendar day of a planning horizon"""
    date: dt.date = Field(default_factory=dt.date.today)
    weather: Optional[WeatherSnapshot] = None
    events: List[PlanningEvent] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def _strip_time(cls, value):
        # Accept full ISO timestamps from calendar clients
        if isinstance(value, dt.datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    def context(self) -> Dict[str, Any]:
        """JSON-ready day context for the recommender"""
        return self.model_dump(mode="json", exclude_none=True)


# =============================================================================
# Display projections
# =============================================================================

class OutfitItemView(CamelModel):
    id: str
    name: str
    type: Category
    image_url: Optional[str] = None
    color: Optional[str] = None


class OutfitView(CamelModel):
    """Outfit as shown on the daily screen"""
    id: str
    name: Optional[str] = None
    reason: str
    items: List[OutfitItemView]


class PlannedOutfitView(CamelModel):
    id: str
    items: List[OutfitItemView]


class SavedOutfitResponse(CamelModel):
    """Saved outfit with resolved items"""
    id: str
    name: str
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    image_url: Optional[str] = None
    piece_count: int
    last_modified: Optional[dt.datetime] = None
    items: List[OutfitItemView]


class SavedOutfitListResponse(CamelModel):
    outfits: List[SavedOutfitResponse]


# =============================================================================
# Daily
# =============================================================================

class DailyOutfitRequest(CamelModel):
    """Input for the daily outfit"""
    strategy: Literal["existing", "new"] = "existing"
    tags: List[str] = Field(default_factory=list)
    weather: Optional[WeatherSnapshot] = None
    event: Optional[PlanningEvent] = None
    day: Optional[PlanningDay] = None
    persona: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("persona", "user"))
    rules: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("strategy", mode="before")
    @classmethod
    def _lower_strategy(cls, value):
        return value.lower() if isinstance(value, str) else value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_list(cls, value):
        return value if isinstance(value, list) else []


class DailyOutfitResponse(CamelModel):
    source: Literal["existing", "new"]
    weather: Optional[WeatherSnapshot] = None
    main_outfit: OutfitView
    alternatives: List[OutfitView] = Field(default_factory=list)


# =============================================================================
# Weekly
# =============================================================================

class WeeklyPlanRequest(CamelModel):
    start_date: Optional[dt.date] = None
    days: Optional[List[PlanningDay]] = None
    persona: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("persona", "user"))
    rules: Dict[str, Any] = Field(default_factory=dict)


class DayAssignment(CamelModel):
    """Outfit chosen for one day; unresolvable days have no assignment at all"""
    date: dt.date
    outfit_id: str
    outfit: PlannedOutfitView
    rationale: str
    source: Literal["existing", "relaxed", "generated"]


class WeeklyPlanResponse(CamelModel):
    days: List[DayAssignment]


# =============================================================================
# Multi-day recommendation
# =============================================================================

class RecommendRequest(CamelModel):
    days: List[PlanningDay] = Field(default_factory=list)
    persona: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("persona", "user"))
    rules: Dict[str, Any] = Field(default_factory=dict)


class SuggestedItemView(CamelModel):
    item_id: str
    reason: Optional[str] = None


class RecommendedDay(CamelModel):
    date: Optional[str] = None
    outfit_id: Optional[str] = None
    outfit: List[SuggestedItemView]
    notes: Optional[str] = None


class RecommendResponse(CamelModel):
    days: List[RecommendedDay]
