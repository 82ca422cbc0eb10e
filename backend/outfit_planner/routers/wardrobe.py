import logging

from fastapi import APIRouter, Depends, Response

from ..core.exceptions import NotFoundError
from ..schemas import WardrobeItem, WardrobeItemCreate, WardrobeListResponse
from ..store import OutfitStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/wardrobe", tags=["wardrobe"])


@router.get("/items", response_model=WardrobeListResponse)
def list_wardrobe_items(store: OutfitStore = Depends(get_store)):
    """Wardrobe items, newest first, with normalized tags"""
    return WardrobeListResponse(items=store.list_items())


@router.post("/items", response_model=WardrobeItem, status_code=201)
def create_wardrobe_item(payload: WardrobeItemCreate, store: OutfitStore = Depends(get_store)):
    """
    Add an item tagged by the external tagging pipeline.
    The raw tagger JSON is stored as-is and normalized on read.
    """
    item = store.add_item(payload)
    logger.info(f"Added wardrobe item {item.id} ({item.tags.category})")
    return item


@router.delete("/items/{item_id}", status_code=204)
def delete_wardrobe_item(item_id: str, store: OutfitStore = Depends(get_store)):
    """
    Delete a wardrobe item.
    The item is removed from every saved outfit; outfits left empty are deleted.
    """
    if not store.delete_item(item_id):
        raise NotFoundError("Wardrobe item", item_id)
    return Response(status_code=204)
