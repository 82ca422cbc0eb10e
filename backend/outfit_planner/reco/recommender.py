"""
Generative recommender: contract and Gemini API implementation.

The recommender proposes item sets for one or more planning days. Its output is
untrusted: ids may not exist in the wardrobe, and an "existing outfit" claim may
be wrong. Callers re-validate before persisting (see ``reco.generation``).
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from ..config import settings
from ..core.exceptions import RecommenderError

logger = logging.getLogger(__name__)

# Gemini token limits (approximate)
TOKEN_WARNING_THRESHOLD = 50000

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


@dataclass
class SuggestedItem:
    item_id: str
    reason: Optional[str] = None


@dataclass
class DaySuggestion:
    """Recommender output for one day"""
    date: Optional[str]
    items: List[SuggestedItem] = field(default_factory=list)
    use_existing_outfit_id: Optional[str] = None
    notes: Optional[str] = None
    name: Optional[str] = None
    tags: Optional[Any] = None

    @property
    def item_ids(self) -> List[str]:
        return [item.item_id for item in self.items]


class Recommender:
    """Generative recommender contract. Stateless across calls."""

    def recommend(
        self,
        persona: Dict[str, Any],
        days: List[Dict[str, Any]],
        wardrobe: List[Dict[str, Any]],
        existing_outfits: List[Dict[str, Any]],
        rules: Dict[str, Any],
    ) -> List[DaySuggestion]:
        """Return one suggestion per day, in the order the model produced them.

        Raises:
            RecommenderError: call failed, timed out, or output was empty/unparseable
        """
        raise NotImplementedError


OUTFIT_SYSTEM_PROMPT = """You are an AI stylist. Given:
- user persona/preferences,
- upcoming days (weather + events),
- wardrobe items (id + tags),
- existing outfits (id + item_ids),
recommend outfits for each day using the provided wardrobe IDs.

RULES:
- Always output JSON only, no prose.
- Prefer reusing existing outfits if they exactly match the recommended item set.
- Do not introduce items that are not in the provided wardrobe.
- Respect seasonality, weather, event dress codes, and the user's stated style/fit preferences.
- Avoid exact repeats within the same horizon unless unavoidable.

RESPONSE FORMAT (JSON only, no markdown, no comments):
{
  "days": [
    {
      "date": "YYYY-MM-DD",
      "outfit": [
        {"item_id": "<wardrobe item id>", "reason": "short explanation"}
      ],
      "use_existing_outfit_id": "<optional outfit id if a perfect match exists>",
      "notes": "optional styling notes"
    }
  ]
}"""


class GeminiRecommender(Recommender):
    """Recommender backed by the Gemini generateContent REST API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.timeout = timeout or settings.RECOMMENDER_TIMEOUT
        self.temperature = settings.RECOMMENDER_TEMPERATURE if temperature is None else temperature

    def recommend(self, persona, days, wardrobe, existing_outfits, rules) -> List[DaySuggestion]:
        if not self.api_key:
            raise RecommenderError("GEMINI_API_KEY not set")

        prompt = build_prompt(persona, days, wardrobe, existing_outfits, rules)
        estimated_tokens = _estimate_tokens(prompt)
        if estimated_tokens > TOKEN_WARNING_THRESHOLD:
            logger.warning(f"Prompt is large ({estimated_tokens} tokens, {len(wardrobe)} items)")
        logger.info(f"Sending prompt to Gemini: {len(days)} days, {len(wardrobe)} items, ~{estimated_tokens} tokens")

        try:
            response = requests.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                json={
                    "contents": [{"parts": [{"text": prompt}]}],
                    "generationConfig": {
                        "temperature": self.temperature,
                        "maxOutputTokens": 2048,
                        "responseMimeType": "application/json",
                    },
                },
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise RecommenderError(f"request timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise RecommenderError(f"request failed: {exc}") from exc

        if response.status_code != 200:
            logger.error(f"Gemini API error: {response.status_code} {response.text[:500]}")
            raise RecommenderError(
                f"Gemini API returned {response.status_code}",
                details={"status_code": response.status_code},
            )

        try:
            result = response.json()
        except ValueError as exc:
            raise RecommenderError("Gemini API returned a non-JSON body") from exc

        text = _candidate_text(result)
        if not text:
            logger.error(f"No candidate text in Gemini response: {json.dumps(result)[:500]}")
            raise RecommenderError("empty response from stylist model")

        parsed = extract_json(text)
        if parsed is None:
            raise RecommenderError("stylist response was not valid JSON")
        return parse_recommendation(parsed)


def build_prompt(
    persona: Dict[str, Any],
    days: List[Dict[str, Any]],
    wardrobe: List[Dict[str, Any]],
    existing_outfits: List[Dict[str, Any]],
    rules: Dict[str, Any],
) -> str:
    """Build the stylist prompt: system rules followed by the JSON context."""
    context = {
        "user": persona or {},
        "days": days,
        "wardrobe": wardrobe,
        "existing_outfits": existing_outfits,
        "rules": rules or {},
    }
    return f"{OUTFIT_SYSTEM_PROMPT}\n\nINPUT:\n{json.dumps(context, default=str)}\n\nReturn valid JSON only."


def _optional_text(container: Dict[str, Any], key: str) -> Optional[str]:
    """A free-text field of the model output; anything but a string is malformed."""
    value = container.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise RecommenderError(f"'{key}' must be a string, got {type(value).__name__}")
    return value.strip() or None


def _optional_id(value: Any, key: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise RecommenderError(f"'{key}' must be an id, got {type(value).__name__}")
    return str(value).strip() or None


def _json_tags(value: Any) -> Any:
    if value is None:
        return None
    try:
        json.dumps(value)
    except (TypeError, ValueError) as exc:
        raise RecommenderError("'tags' is not JSON-serializable") from exc
    return value


def parse_recommendation(parsed: Any) -> List[DaySuggestion]:
    """Turn the model's JSON into day suggestions.

    Entries that are not objects are skipped. A field of the wrong type makes the
    whole answer unusable. Raises RecommenderError when there is no usable
    ``days`` list.
    """
    days = parsed.get("days") if isinstance(parsed, dict) else None
    if not isinstance(days, list) or not days:
        raise RecommenderError("no days in stylist response")

    suggestions = []
    for day in days:
        if not isinstance(day, dict):
            continue
        outfit = day.get("outfit")
        if outfit is None:
            outfit = []
        if not isinstance(outfit, list):
            raise RecommenderError(f"'outfit' must be a list, got {type(outfit).__name__}")

        items = []
        for entry in outfit:
            if isinstance(entry, dict):
                item_id = _optional_id(entry.get("item_id") or entry.get("id"), "item_id")
                reason = _optional_text(entry, "reason")
            else:
                item_id, reason = _optional_id(entry, "item_id"), None
            if item_id is None:
                continue
            items.append(SuggestedItem(item_id=item_id, reason=reason))

        suggestions.append(
            DaySuggestion(
                date=_optional_id(day.get("date"), "date"),
                items=items,
                use_existing_outfit_id=_optional_id(day.get("use_existing_outfit_id"), "use_existing_outfit_id"),
                notes=_optional_text(day, "notes"),
                name=_optional_text(day, "name"),
                tags=_json_tags(day.get("tags")),
            )
        )

    if not suggestions:
        raise RecommenderError("no usable days in stylist response")
    return suggestions


def _candidate_text(result: Any) -> Optional[str]:
    """Text of the first candidate, or None when the response has another shape."""
    candidates = result.get("candidates") if isinstance(result, dict) else None
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    if not isinstance(text, str):
        return None
    return text.strip() or None


def _estimate_tokens(text: str) -> int:
    """Rough token estimation (1 token ≈ 4 characters for English text)."""
    return len(text) // 4


def extract_json(text: str) -> Optional[Dict]:
    """
    Extract and parse JSON from a model response.
    Handles pure JSON, markdown code blocks, or JSON embedded in text.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    json_match = re.search(r'```(?:json)?\s*(\{.*\})\s*```', text, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group(1))
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse JSON from code block: {e}")

    # Brace matching for JSON embedded in prose
    start_idx = text.find('{')
    if start_idx != -1:
        brace_count = 0
        for i in range(start_idx, len(text)):
            if text[i] == '{':
                brace_count += 1
            elif text[i] == '}':
                brace_count -= 1
                if brace_count == 0:
                    try:
                        return json.loads(text[start_idx:i+1])
                    except json.JSONDecodeError as e:
                        logger.warning(f"Failed to parse JSON from brace-matched text: {e}")
                        break

    logger.error(f"Failed to extract valid JSON from model response: {text[:500]}")
    return None


def get_recommender() -> Recommender:
    """Dependency providing the configured recommender"""
    return GeminiRecommender()
