"""
Comment and bubble position API routes.

This module contains endpoints for guest comment submission, listing
comments and saved bubble positions, moving a bubble, and the SSE stream of
new comments for a photo.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from loguru import logger

from logic.config import load_config
from logic.models import BubblePosition, CommentCreate, PositionUpdate
from logic.placement import band_from_config, clamp_point
from logic.store import CommentStore, CommentStoreError
from logic.validation import sanitise_comment_text, sanitise_percent
from server.broadcast import event_generator
from server.deps import get_photo, get_store

router = APIRouter()

SAVE_FAILED_MESSAGE = "コメントの保存中にエラーが発生しました。"


@router.get("/api/photos/{photo_id}/comments")
async def list_comments(photo: dict = Depends(get_photo), store: CommentStore = Depends(get_store)):
    """List comments on a photo, newest first.

    Returns:
        Dictionary with the photo id and its comments. ``ok`` is False when
        the store could not be read, in which case the list is empty.
    """
    try:
        comments = await store.list_comments(photo["id"])
    except CommentStoreError as e:
        logger.warning(f"Listing comments for {photo['id']} failed: {e}")
        return {"photo_id": photo["id"], "ok": False, "comments": []}

    return {
        "photo_id": photo["id"],
        "ok": True,
        "comments": [c.to_dict() for c in comments],
    }


@router.post("/api/photos/{photo_id}/comments", status_code=201)
async def create_comment(
        payload: CommentCreate,
        photo: dict = Depends(get_photo),
        store: CommentStore = Depends(get_store),
):
    """Store a guest comment.

    The comment is pushed to live listeners of the photo by the store.

    Raises:
        HTTPException: 400 if the text is empty or too long, 502 if the store
            rejected the insert (the guest's input would otherwise be lost).
    """
    config = load_config()
    text = sanitise_comment_text(payload.text, config["max_comment_length"])

    try:
        comment = await store.insert_comment(photo["id"], text)
    except CommentStoreError as e:
        logger.error(f"Saving comment on {photo['id']} failed: {e}")
        raise HTTPException(502, SAVE_FAILED_MESSAGE)

    return comment.to_dict()


@router.get("/api/photos/{photo_id}/positions")
async def list_positions(photo: dict = Depends(get_photo), store: CommentStore = Depends(get_store)):
    """List saved bubble positions for a photo.

    Failures are not fatal: the host falls back to default placement.
    """
    try:
        positions = await store.list_positions(photo["id"])
    except CommentStoreError as e:
        logger.warning(f"Listing positions for {photo['id']} failed: {e}")
        return {"photo_id": photo["id"], "ok": False, "positions": []}

    return {
        "photo_id": photo["id"],
        "ok": True,
        "positions": [p.to_dict() for p in positions],
    }


@router.put("/api/photos/{photo_id}/positions/{comment_id}")
async def save_position(
        comment_id: str,
        payload: PositionUpdate,
        photo: dict = Depends(get_photo),
        store: CommentStore = Depends(get_store),
):
    """Save a bubble position, clamped into the safe band. Last writer wins.

    Raises:
        HTTPException: 400 on non-numeric coordinates, 502 if the store failed.
    """
    band = band_from_config(load_config())
    point = clamp_point(sanitise_percent(payload.top), sanitise_percent(payload.left), band)
    position = BubblePosition(comment_id=comment_id, photo_id=photo["id"], top=point.top, left=point.left)

    try:
        await store.upsert_position(position)
    except CommentStoreError as e:
        logger.warning(f"Saving position of {comment_id} failed: {e}")
        raise HTTPException(502, "Position could not be saved")

    return position.to_dict()


@router.get("/api/photos/{photo_id}/stream")
async def stream_comments(photo: dict = Depends(get_photo), store: CommentStore = Depends(get_store)):
    """Server-Sent Events (SSE) endpoint for new comments on a photo.

    Returns:
        StreamingResponse with text/event-stream content type.
    """
    return StreamingResponse(event_generator(store, photo["id"]), media_type="text/event-stream")
