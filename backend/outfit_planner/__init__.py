"""
Outfit planner backend: daily and weekly outfit assignment over a tagged wardrobe.
"""

__version__ = "1.0.0"
