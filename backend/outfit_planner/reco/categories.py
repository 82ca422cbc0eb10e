"""
Fixed wardrobe category partition.

RESTRICTED items may not repeat within a planning horizon; FLEXIBLE items may.
"""
from typing import Optional

CATEGORIES = ("top", "bottom", "dress", "outerwear", "shoes", "accessory")

RESTRICTED_CATEGORIES = frozenset({"top", "bottom", "dress"})
FLEXIBLE_CATEGORIES = frozenset({"outerwear", "shoes", "accessory"})

DEFAULT_CATEGORY = "accessory"

# Tagger broad categories -> planner category
BROAD_CATEGORY_MAP = {
    "tops": "top",
    "top": "top",
    "bottoms": "bottom",
    "bottom": "bottom",
    "one-piece": "dress",
    "dress": "dress",
    "dresses": "dress",
    "outerwear": "outerwear",
    "shoes": "shoes",
    "accessories": "accessory",
    "accessory": "accessory",
    "underwear/sleepwear": "accessory",
    "sportswear/athleisure": "top",
}


def map_broad_category(category: Optional[str]) -> str:
    """Map a tagger broad category onto the fixed enumeration (unknown -> accessory)."""
    normalized = (category or "").strip().lower()
    return BROAD_CATEGORY_MAP.get(normalized, DEFAULT_CATEGORY)


def is_restricted(category: Optional[str]) -> bool:
    return (category or "").lower() in RESTRICTED_CATEGORIES
