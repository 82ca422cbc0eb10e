"""
Tests for category mapping and request/response schemas
"""
from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from outfit_planner.reco.categories import is_restricted, map_broad_category
from outfit_planner.schemas import (
    DailyOutfitRequest,
    ItemDisplay,
    PlanningDay,
    WardrobeTags,
    WeeklyPlanRequest,
)


class TestCategories:
    @pytest.mark.parametrize("broad,expected", [
        ("Tops", "top"),
        ("bottoms", "bottom"),
        ("One-Piece", "dress"),
        ("Outerwear", "outerwear"),
        ("Shoes", "shoes"),
        ("Accessories", "accessory"),
        ("Underwear/Sleepwear", "accessory"),
        ("Sportswear/Athleisure", "top"),
        ("Swimwear", "accessory"),
        (None, "accessory"),
    ])
    def test_broad_category_mapping(self, broad, expected):
        assert map_broad_category(broad) == expected

    def test_restricted_partition(self):
        assert all(is_restricted(c) for c in ("top", "bottom", "dress"))
        assert not any(is_restricted(c) for c in ("outerwear", "shoes", "accessory"))
        assert not is_restricted(None)


class TestWardrobeTags:
    def test_missing_lists_default_to_empty(self):
        tags = WardrobeTags.from_raw({"item_name": "Linen Shirt", "broad_category": "Tops"})
        assert tags.name == "Linen Shirt"
        assert tags.category == "top"
        assert tags.colors == []
        assert tags.seasons == []
        assert tags.styles == []
        assert tags.keywords == []

    def test_loose_fields_are_normalized(self):
        tags = WardrobeTags.from_raw({
            "item_name": "Trench",
            "broad_category": "Outerwear",
            "sub_category": "Coat",
            "colors": "Beige",
            "seasonality": ["Autumn", None, " "],
            "style_vibe": ["Classic"],
            "tags": ["waterproof"],
        })
        assert tags.category == "outerwear"
        assert tags.sub_category == "Coat"
        assert tags.colors == ["beige"]
        assert tags.seasons == ["autumn"]
        assert tags.styles == ["classic"]
        assert tags.keywords == ["waterproof"]

    def test_no_raw_tags(self):
        tags = WardrobeTags.from_raw(None)
        assert tags.name == "Unnamed Item"
        assert tags.category == "accessory"

    def test_display_color_is_first_color(self):
        item = ItemDisplay(id="a", name="A", type="top", colors=["red", "white"])
        assert item.color == "red"
        assert ItemDisplay(id="b", name="B", type="top").color is None


class TestRequests:
    def test_daily_defaults(self):
        request = DailyOutfitRequest()
        assert request.strategy == "existing"
        assert request.tags == []
        assert request.persona == {}

    def test_daily_strategy_case_insensitive(self):
        assert DailyOutfitRequest(strategy="NEW").strategy == "new"

    def test_daily_unknown_strategy_rejected(self):
        with pytest.raises(PydanticValidationError):
            DailyOutfitRequest(strategy="random")

    def test_daily_non_list_tags_ignored(self):
        assert DailyOutfitRequest.model_validate({"tags": "casual"}).tags == []

    def test_user_is_an_alias_for_persona(self):
        request = DailyOutfitRequest.model_validate({"user": {"style": "minimal"}})
        assert request.persona == {"style": "minimal"}

    def test_weekly_camel_case_fields(self):
        request = WeeklyPlanRequest.model_validate({"startDate": "2024-05-06"})
        assert request.start_date == date(2024, 5, 6)
        assert request.days is None

    def test_planning_day_accepts_timestamps(self):
        day = PlanningDay.model_validate({
            "date": "2024-05-06T08:30:00.000Z",
            "weather": {"temperature": 18, "condition": "Rain", "humidity": 80},
            "events": [{"title": "Standup", "dressCode": "Business Casual"}],
        })
        assert day.date == date(2024, 5, 6)
        context = day.context()
        assert context["date"] == "2024-05-06"
        assert context["weather"]["humidity"] == 80
        assert context["events"][0]["dress_code"] == "Business Casual"
