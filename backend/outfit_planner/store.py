"""
Wardrobe / outfit store: the persistence contract the planner depends on, and
its SQLAlchemy implementation.
"""
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .core.exceptions import StoreError
from .database import get_db
from .models import Outfit as OutfitModel
from .models import WardrobeItem as WardrobeItemModel
from .schemas import ItemDisplay, OutfitRecord, WardrobeItem, WardrobeItemCreate, WardrobeTags
from .utils.cloudinary_helper import build_image_url

logger = logging.getLogger(__name__)


class OutfitStore:
    """Persistence interface for wardrobe items and outfit records.

    Invariant: a wardrobe item deletion removes the id from every outfit and
    purges outfits left empty, so readers never observe an empty outfit.
    """

    def list_items(self) -> List[WardrobeItem]:
        raise NotImplementedError

    def add_item(self, payload: WardrobeItemCreate) -> WardrobeItem:
        raise NotImplementedError

    def delete_item(self, item_id: str) -> bool:
        raise NotImplementedError

    def list_outfits(self, ids: Optional[Iterable[str]] = None) -> List[OutfitRecord]:
        raise NotImplementedError

    def insert_outfit(
        self,
        item_ids: List[str],
        tags: Optional[object] = None,
        notes: Optional[str] = None,
        name: Optional[str] = None,
    ) -> OutfitRecord:
        raise NotImplementedError

    def delete_outfit(self, outfit_id: str) -> bool:
        raise NotImplementedError

    def resolve_items(self, ids: Iterable[str]) -> Dict[str, ItemDisplay]:
        raise NotImplementedError

    def health_check(self) -> Dict[str, str]:
        raise NotImplementedError


class SQLOutfitStore(OutfitStore):
    """Store backed by a SQLAlchemy session (PostgreSQL in production, SQLite locally)."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Store operation '{operation}' failed: {exc}")
            raise StoreError(f"Failed to {operation}") from exc

    @staticmethod
    def _to_item(row: WardrobeItemModel) -> WardrobeItem:
        return WardrobeItem(
            id=row.id,
            tags=WardrobeTags.from_raw(row.tags),
            image_url=build_image_url(row.cloudinary_id, row.image_url),
            notes=row.notes,
            created_at=row.created_at,
        )

    # -- wardrobe -----------------------------------------------------------

    def list_items(self) -> List[WardrobeItem]:
        with self._guard("list wardrobe items"):
            rows = (
                self.db.query(WardrobeItemModel)
                .order_by(WardrobeItemModel.created_at.desc(), WardrobeItemModel.id)
                .all()
            )
        return [self._to_item(row) for row in rows]

    def add_item(self, payload: WardrobeItemCreate) -> WardrobeItem:
        row = WardrobeItemModel(
            id=payload.id or str(uuid.uuid4()),
            image_url=payload.image_url,
            cloudinary_id=payload.cloudinary_id,
            tags=payload.tags,
            notes=payload.notes,
        )
        with self._guard("add wardrobe item"):
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        return self._to_item(row)

    def delete_item(self, item_id: str) -> bool:
        """Delete an item, strip it from every outfit and purge emptied outfits."""
        with self._guard("delete wardrobe item"):
            row = self.db.query(WardrobeItemModel).filter(WardrobeItemModel.id == item_id).first()
            if row is None:
                return False
            self.db.delete(row)

            pruned = purged = 0
            for outfit in self.db.query(OutfitModel).all():
                if item_id not in (outfit.item_ids or []):
                    continue
                remaining = [i for i in outfit.item_ids if i != item_id]
                if remaining:
                    outfit.item_ids = remaining
                    pruned += 1
                else:
                    self.db.delete(outfit)
                    purged += 1
            self.db.commit()

        logger.info(f"Deleted wardrobe item {item_id}: pruned {pruned} outfits, purged {purged}")
        return True

    # -- outfits ------------------------------------------------------------

    def list_outfits(self, ids: Optional[Iterable[str]] = None) -> List[OutfitRecord]:
        """Outfit records, newest first; ``ids`` filters the snapshot."""
        with self._guard("list outfits"):
            query = self.db.query(OutfitModel)
            if ids is not None:
                wanted = list(dict.fromkeys(str(i) for i in ids))
                if not wanted:
                    return []
                query = query.filter(OutfitModel.id.in_(wanted))
            rows = query.order_by(OutfitModel.created_at.desc(), OutfitModel.id).all()
        return [OutfitRecord.model_validate(row) for row in rows]

    def insert_outfit(
        self,
        item_ids: List[str],
        tags: Optional[object] = None,
        notes: Optional[str] = None,
        name: Optional[str] = None,
    ) -> OutfitRecord:
        if not item_ids:
            raise StoreError("Refusing to persist an outfit without items")
        row = OutfitModel(
            id=str(uuid.uuid4()),
            item_ids=list(item_ids),
            tags=tags,
            notes=notes,
            name=name,
        )
        with self._guard("insert outfit"):
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        logger.info(f"Persisted new outfit {row.id} with {len(row.item_ids)} items")
        return OutfitRecord.model_validate(row)

    def delete_outfit(self, outfit_id: str) -> bool:
        with self._guard("delete outfit"):
            deleted = self.db.query(OutfitModel).filter(OutfitModel.id == outfit_id).delete()
            self.db.commit()
        return deleted > 0

    def resolve_items(self, ids: Iterable[str]) -> Dict[str, ItemDisplay]:
        """Display projections keyed by id. Unknown ids are silently dropped."""
        wanted = list(dict.fromkeys(str(i) for i in ids if i))
        if not wanted:
            return {}
        with self._guard("resolve wardrobe items"):
            rows = self.db.query(WardrobeItemModel).filter(WardrobeItemModel.id.in_(wanted)).all()

        resolved: Dict[str, ItemDisplay] = {}
        for row in rows:
            tags = WardrobeTags.from_raw(row.tags)
            resolved[row.id] = ItemDisplay(
                id=row.id,
                name=tags.name,
                type=tags.category,
                category=tags.sub_category or "Other",
                colors=tags.colors,
                image_url=build_image_url(row.cloudinary_id, row.image_url),
            )
        missing = len(wanted) - len(resolved)
        if missing:
            logger.debug(f"{missing} referenced wardrobe items no longer exist")
        return resolved

    def health_check(self) -> Dict[str, str]:
        try:
            self.db.execute(text("SELECT 1"))
            return {"status": "healthy"}
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Health check failed: {exc}")
            return {"status": "unhealthy", "error": str(exc)}


def get_store(db: Session = Depends(get_db)) -> OutfitStore:
    """Dependency providing the request-scoped store"""
    return SQLOutfitStore(db)
