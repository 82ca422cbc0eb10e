"""
Saved outfit model.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Text, JSON, DateTime
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.types import TypeDecorator

from .base import Base


class ItemIdList(TypeDecorator):
    """
    Wardrobe item ids of an outfit.
    Uses TEXT[] on PostgreSQL, the native column type for id lists.
    Falls back to JSON on SQLite/other databases.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(ARRAY(String))
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return [str(v) for v in value]

    def process_result_value(self, value, dialect):
        if value is None:
            return []
        return [str(v) for v in value]


class Outfit(Base):
    """Outfit record: a non-empty set of wardrobe item ids"""
    __tablename__ = "outfits"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=True)
    item_ids = Column(ItemIdList, nullable=False)
    tags = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
