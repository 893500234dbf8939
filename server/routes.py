"""
Basic API routes.

This module contains the fundamental API endpoints: health check and the
photo catalog.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from logic.config import load_config
from logic.photos import load_catalog
from server.deps import get_photo

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
def health():
    """Liveness probe.

    Returns:
        Plain "OK".
    """
    return "OK"


@router.get("/api/photos")
def list_photos():
    """Get the photo catalog.

    Returns:
        Dictionary with the default photo id and all photos grouped in
        catalog order.
    """
    config = load_config()
    return {
        "default_photo": config["default_photo"],
        "photos": load_catalog(config),
    }


@router.get("/api/photos/{photo_id}")
def get_photo_detail(photo: dict = Depends(get_photo)):
    """Get one catalog photo.

    Returns:
        Photo dictionary with id, url, thumbnail, label and group.
    """
    return photo
