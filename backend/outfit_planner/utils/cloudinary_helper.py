"""
Cloudinary helpers for wardrobe item image URLs
"""
from typing import Optional

import cloudinary
from cloudinary import CloudinaryImage

from ..config import settings

"""Initialize Cloudinary with configuration from settings"""
def initialize_cloudinary() -> bool:
    if settings.cloudinary_configured:
        cloudinary.config(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            secure=True
        )
        return True
    return False


def build_image_url(public_id: Optional[str], fallback_url: Optional[str] = None) -> Optional[str]:
    """
    Resolve the display URL of a wardrobe item image.

    Items uploaded through Cloudinary carry a public id; the delivery URL is
    built from it when Cloudinary is enabled. Otherwise the stored URL is used.
    """
    if public_id and settings.USE_CLOUDINARY and initialize_cloudinary():
        return CloudinaryImage(public_id).build_url(secure=True)
    return fallback_url
