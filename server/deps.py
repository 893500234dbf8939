"""Dependency utilities for route handlers.

Resolves the shared comment store and validates photo ids against the
catalog.
"""

from fastapi import HTTPException, Request

from logic.config import load_config
from logic.photos import find_photo, load_catalog
from logic.store import CommentStore


def get_store(request: Request) -> CommentStore:
    """Get the comment store attached to the application.

    Returns:
        The CommentStore created at startup.
    """
    return request.app.state.store


def get_photo(photo_id: str) -> dict:
    """Resolve a photo from the catalog.

    Args:
        photo_id: Catalog id from the path.

    Returns:
        Photo dictionary.

    Raises:
        HTTPException: If the photo is not in the catalog.
    """
    photo = find_photo(load_catalog(load_config()), photo_id)
    if photo is None:
        raise HTTPException(status_code=404, detail=f"Photo '{photo_id}' not found")
    return photo
