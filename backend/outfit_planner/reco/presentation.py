"""
Display formatting: outfit records resolved against the wardrobe for API responses.
"""
import logging
from typing import Any, Dict, List

from ..core.exceptions import ResolutionError
from ..schemas import (
    ItemDisplay,
    OutfitItemView,
    OutfitRecord,
    OutfitView,
    SavedOutfitResponse,
)

logger = logging.getLogger(__name__)

DEFAULT_OUTFIT_NAME = "Saved Outfit"


def to_item_view(item: ItemDisplay) -> OutfitItemView:
    return OutfitItemView(
        id=item.id,
        name=item.name,
        type=item.type,
        image_url=item.image_url,
        color=item.color,
    )


def resolve_outfit_items(record: OutfitRecord, resolved: Dict[str, ItemDisplay]) -> List[OutfitItemView]:
    """Items of a record in stored order; ids that no longer resolve are skipped.

    Raises ResolutionError when nothing in the record resolves.
    """
    items = [to_item_view(resolved[i]) for i in record.item_ids if i in resolved]
    if not items:
        raise ResolutionError(record.id)
    if len(items) < len(record.item_ids):
        logger.debug(f"Outfit {record.id}: {len(record.item_ids) - len(items)} items no longer resolve")
    return items


def normalize_outfit_tags(tags: Any) -> List[str]:
    """Free-form outfit tags as a flat list of strings."""
    if isinstance(tags, dict):
        tags = tags.get("tags")
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, list):
        return []
    return [str(t) for t in tags if t is not None and str(t).strip()]


def outfit_view(record: OutfitRecord, resolved: Dict[str, ItemDisplay], reason: str) -> OutfitView:
    return OutfitView(
        id=record.id,
        name=record.name or DEFAULT_OUTFIT_NAME,
        reason=reason,
        items=resolve_outfit_items(record, resolved),
    )


def saved_outfit_view(record: OutfitRecord, resolved: Dict[str, ItemDisplay]) -> SavedOutfitResponse:
    """Saved-outfit card. Items that no longer resolve are left out of the card."""
    items = [to_item_view(resolved[i]) for i in record.item_ids if i in resolved]
    return SavedOutfitResponse(
        id=record.id,
        name=record.name or DEFAULT_OUTFIT_NAME,
        tags=normalize_outfit_tags(record.tags),
        notes=record.notes,
        image_url=items[0].image_url if items else None,
        piece_count=len(items),
        last_modified=record.created_at,
        items=items,
    )
