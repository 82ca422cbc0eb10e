"""
Database models for the outfit planner.

Import all models here for easy access and to ensure they are registered with SQLAlchemy.
"""
from .base import Base
from .wardrobe import WardrobeItem
from .outfit import Outfit, ItemIdList

__all__ = ["Base", "WardrobeItem", "Outfit", "ItemIdList"]
