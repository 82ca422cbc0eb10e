"""
Wardrobe item schemas.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .common import CamelModel
from ..reco.categories import map_broad_category

Category = Literal["top", "bottom", "dress", "outerwear", "shoes", "accessory"]


def _as_list(value: Any, lower: bool = False) -> List[str]:
    """Coerce a loosely typed tag field into a list of strings (missing -> [])."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        return []
    out = [str(v).strip() for v in value if v is not None and str(v).strip()]
    return [v.lower() for v in out] if lower else out


class WardrobeTags(BaseModel):
    """Tagged structure of a wardrobe item.

    List fields always exist; an absent tag is an empty list, never None.
    """
    name: str = "Unnamed Item"
    category: Category = "accessory"
    sub_category: Optional[str] = None
    colors: List[str] = Field(default_factory=list)
    seasons: List[str] = Field(default_factory=list)
    styles: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)

    @classmethod
    def from_raw(cls, raw: Optional[Dict[str, Any]]) -> "WardrobeTags":
        """Build from the tagging pipeline's JSON (``item_name``, ``broad_category``, ...)."""
        raw = raw if isinstance(raw, dict) else {}
        broad = raw.get("broad_category") or raw.get("category")
        return cls(
            name=raw.get("item_name") or raw.get("name") or "Unnamed Item",
            category=map_broad_category(broad),
            sub_category=raw.get("sub_category") or broad or None,
            colors=_as_list(raw.get("colors"), lower=True),
            seasons=_as_list(raw.get("seasonality", raw.get("seasons")), lower=True),
            styles=_as_list(raw.get("style_vibe", raw.get("styles")), lower=True),
            keywords=_as_list(raw.get("tags")),
        )


class ItemDisplay(BaseModel):
    """Display projection of a resolved wardrobe item"""
    id: str
    name: str
    type: Category
    category: str = "Other"
    colors: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None

    @property
    def color(self) -> Optional[str]:
        return self.colors[0] if self.colors else None


class WardrobeItemCreate(CamelModel):
    """An externally tagged item to add to the wardrobe"""
    id: Optional[str] = None
    tags: Dict[str, Any] = Field(default_factory=dict, description="Raw tagger JSON")
    image_url: Optional[str] = None
    cloudinary_id: Optional[str] = None
    notes: Optional[str] = None


class WardrobeItem(CamelModel):
    """Wardrobe item with its normalized tags"""
    id: str
    tags: WardrobeTags
    image_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class WardrobeListResponse(CamelModel):
    items: List[WardrobeItem]
