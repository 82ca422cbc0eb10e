"""
Wardrobe item model.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Text, JSON, DateTime

from .base import Base


class WardrobeItem(Base):
    """Wardrobe item model.

    ``tags`` holds the raw JSON produced by the external tagging pipeline;
    read it through ``schemas.WardrobeTags.from_raw`` rather than directly.
    """
    __tablename__ = "wardrobe_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    image_url = Column(Text, nullable=True)
    cloudinary_id = Column(String(255), nullable=True)  # For URL building
    tags = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
