"""
Tests for the Gemini-backed recommender and its response parsing
"""
import json

import pytest
import requests

from outfit_planner.core.exceptions import RecommenderError
from outfit_planner.reco import recommender as recommender_module
from outfit_planner.reco.recommender import (
    GeminiRecommender,
    build_prompt,
    extract_json,
    parse_recommendation,
)

DAYS = [{"date": "2024-05-06", "weather": {"temperature": 21, "condition": "Sunny"}}]
WARDROBE = [
    {"id": "top1", "tags": {"name": "White Tee", "category": "top"}},
    {"id": "bottom1", "tags": {"name": "Blue Jeans", "category": "bottom"}},
]
EXISTING = [{"id": "o1", "item_ids": ["top1", "bottom1"]}]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


def gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def gemini():
    return GeminiRecommender(api_key="test-key", model="gemini-test", timeout=5, temperature=0.2)


@pytest.fixture
def captured_post(monkeypatch):
    """Replace requests.post; tests set ``captured['response']`` before calling"""
    captured = {"response": None, "calls": []}

    def fake_post(url, params=None, json=None, timeout=None):
        captured["calls"].append({"url": url, "params": params, "json": json, "timeout": timeout})
        response = captured["response"]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(recommender_module.requests, "post", fake_post)
    return captured


class TestGeminiRecommender:
    def test_successful_call(self, gemini, captured_post):
        body = {
            "days": [{
                "date": "2024-05-06",
                "outfit": [
                    {"item_id": "top1", "reason": "Light for the sun"},
                    {"item_id": "bottom1", "reason": "Easy pairing"},
                ],
                "use_existing_outfit_id": "o1",
                "notes": "Roll the sleeves.",
            }]
        }
        captured_post["response"] = FakeResponse(payload=gemini_payload(json.dumps(body)))

        suggestions = gemini.recommend({"style": "casual"}, DAYS, WARDROBE, EXISTING, {"tags": ["weekend"]})

        assert len(suggestions) == 1
        day = suggestions[0]
        assert day.date == "2024-05-06"
        assert day.item_ids == ["top1", "bottom1"]
        assert day.items[0].reason == "Light for the sun"
        assert day.use_existing_outfit_id == "o1"
        assert day.notes == "Roll the sleeves."

        (call,) = captured_post["calls"]
        assert call["url"].endswith("/models/gemini-test:generateContent")
        assert call["params"] == {"key": "test-key"}
        assert call["timeout"] == 5
        assert call["json"]["generationConfig"]["temperature"] == 0.2
        prompt = call["json"]["contents"][0]["parts"][0]["text"]
        assert '"top1"' in prompt
        assert '"weekend"' in prompt

    def test_missing_api_key(self, captured_post):
        with pytest.raises(RecommenderError):
            GeminiRecommender(api_key="").recommend({}, DAYS, WARDROBE, EXISTING, {})
        assert captured_post["calls"] == []

    def test_timeout(self, gemini, captured_post):
        captured_post["response"] = requests.Timeout("read timed out")
        with pytest.raises(RecommenderError, match="timed out"):
            gemini.recommend({}, DAYS, WARDROBE, EXISTING, {})

    def test_connection_failure(self, gemini, captured_post):
        captured_post["response"] = requests.ConnectionError("connection refused")
        with pytest.raises(RecommenderError):
            gemini.recommend({}, DAYS, WARDROBE, EXISTING, {})

    def test_http_error_status(self, gemini, captured_post):
        captured_post["response"] = FakeResponse(status_code=429, payload={"error": "quota"})
        with pytest.raises(RecommenderError) as exc_info:
            gemini.recommend({}, DAYS, WARDROBE, EXISTING, {})
        assert exc_info.value.details == {"status_code": 429}

    def test_non_json_body(self, gemini, captured_post):
        captured_post["response"] = FakeResponse(payload=None, text="<html>bad gateway</html>")
        with pytest.raises(RecommenderError):
            gemini.recommend({}, DAYS, WARDROBE, EXISTING, {})

    def test_empty_candidates(self, gemini, captured_post):
        captured_post["response"] = FakeResponse(payload={"candidates": []})
        with pytest.raises(RecommenderError, match="empty response"):
            gemini.recommend({}, DAYS, WARDROBE, EXISTING, {})

    def test_unparseable_text(self, gemini, captured_post):
        captured_post["response"] = FakeResponse(payload=gemini_payload("I would wear the jeans."))
        with pytest.raises(RecommenderError, match="not valid JSON"):
            gemini.recommend({}, DAYS, WARDROBE, EXISTING, {})

    def test_no_days(self, gemini, captured_post):
        captured_post["response"] = FakeResponse(payload=gemini_payload('{"days": []}'))
        with pytest.raises(RecommenderError, match="no days"):
            gemini.recommend({}, DAYS, WARDROBE, EXISTING, {})


class TestParsing:
    def test_entries_may_be_plain_ids(self):
        (day,) = parse_recommendation({"days": [{"date": "2024-05-06", "outfit": ["top1", {"id": "bottom1"}, "", None]}]})
        assert day.item_ids == ["top1", "bottom1"]
        assert day.use_existing_outfit_id is None

    def test_non_dict_days_are_skipped(self):
        suggestions = parse_recommendation({"days": ["junk", {"outfit": [{"item_id": 7}]}]})
        assert len(suggestions) == 1
        assert suggestions[0].item_ids == ["7"]
        assert suggestions[0].date is None

    def test_only_junk_days(self):
        with pytest.raises(RecommenderError):
            parse_recommendation({"days": ["junk"]})

    def test_not_an_object(self):
        with pytest.raises(RecommenderError):
            parse_recommendation(["top1"])

    def test_extract_from_code_block(self):
        text = 'Here you go:\n```json\n{"days": [{"outfit": ["a"]}]}\n```'
        assert extract_json(text) == {"days": [{"outfit": ["a"]}]}

    def test_extract_from_prose(self):
        text = 'Sure! {"days": [{"notes": "a {nested} brace"}]} Enjoy.'
        assert extract_json(text) == {"days": [{"notes": "a {nested} brace"}]}

    def test_extract_failure(self):
        assert extract_json("no json here") is None

    def test_prompt_carries_context(self):
        prompt = build_prompt({"fit": "relaxed"}, DAYS, WARDROBE, EXISTING, {})
        assert "existing_outfits" in prompt
        assert '"relaxed"' in prompt
        assert prompt.rstrip().endswith("Return valid JSON only.")


class TestMalformedOutput:
    @pytest.mark.parametrize("day", [
        {"date": "2024-05-06", "outfit": 5},
        {"date": "2024-05-06", "outfit": {"item_id": "top1"}},
        {"outfit": ["top1"], "notes": {"why": "layers"}},
        {"outfit": ["top1"], "name": ["Monday"]},
        {"outfit": [{"item_id": "top1", "reason": ["warm"]}]},
        {"outfit": [{"item_id": {"nested": "top1"}}]},
        {"outfit": [True]},
        {"outfit": ["top1"], "use_existing_outfit_id": {"id": "o1"}},
        {"outfit": ["top1"], "tags": {"colors": {"navy", "white"}}},
    ])
    def test_wrongly_typed_fields_are_recommender_errors(self, day):
        with pytest.raises(RecommenderError):
            parse_recommendation({"days": [day]})

    def test_numeric_ids_and_plain_tags_accepted(self):
        (day,) = parse_recommendation({"days": [{
            "date": "2024-05-06",
            "outfit": [{"item_id": 12, "reason": " Warm "}],
            "use_existing_outfit_id": 3,
            "tags": ["work", {"mood": "calm"}],
        }]})
        assert day.item_ids == ["12"]
        assert day.items[0].reason == "Warm"
        assert day.use_existing_outfit_id == "3"
        assert day.tags == ["work", {"mood": "calm"}]

    def test_missing_outfit_gives_empty_suggestion(self):
        (day,) = parse_recommendation({"days": [{"date": "2024-05-06", "notes": ""}]})
        assert day.items == []
        assert day.notes is None

    @pytest.mark.parametrize("payload", [
        {"candidates": "none"},
        {"candidates": ["text"]},
        {"candidates": [{"content": "text"}]},
        {"candidates": [{"content": {"parts": {"text": "{}"}}}]},
        {"candidates": [{"content": {"parts": [5]}}]},
        {"candidates": [{"content": {"parts": [{"text": {"days": []}}]}}]},
        ["not", "an", "object"],
    ])
    def test_unexpected_response_shapes(self, gemini, captured_post, payload):
        captured_post["response"] = FakeResponse(payload=payload)
        with pytest.raises(RecommenderError):
            gemini.recommend({}, DAYS, WARDROBE, EXISTING, {})
