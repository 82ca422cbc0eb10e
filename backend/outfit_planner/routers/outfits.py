from fastapi import APIRouter, Depends, Response

from ..core.exceptions import NotFoundError
from ..reco.presentation import saved_outfit_view
from ..schemas import SavedOutfitListResponse
from ..store import OutfitStore, get_store

router = APIRouter(prefix="/api/outfits", tags=["outfits"])


@router.get("", response_model=SavedOutfitListResponse)
def list_outfits(store: OutfitStore = Depends(get_store)):
    """Saved outfits, newest first, with their wardrobe items resolved"""
    records = store.list_outfits()
    if not records:
        return SavedOutfitListResponse(outfits=[])
    resolved = store.resolve_items(i for r in records for i in r.item_ids)
    return SavedOutfitListResponse(outfits=[saved_outfit_view(r, resolved) for r in records])


@router.delete("/{outfit_id}", status_code=204)
def delete_outfit(outfit_id: str, store: OutfitStore = Depends(get_store)):
    if not store.delete_outfit(outfit_id):
        raise NotFoundError("Outfit", outfit_id)
    return Response(status_code=204)
