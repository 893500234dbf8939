"""
Server-sent events (SSE) broadcasting module.

This module streams newly inserted comments for one photo to SSE clients.
Each connection gets its own queue fed by a store subscription, released
when the client goes away.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import asyncio
import json
from datetime import datetime

from loguru import logger

from logic.models import Comment
from logic.store import CommentStore

KEEPALIVE_SECONDS = 15


def comment_event(comment: Comment) -> dict:
    """Build the SSE payload for an inserted comment."""
    return {
        "type": "comment",
        "time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "comment": comment.to_dict(),
    }


async def event_generator(store: CommentStore, photo_id: str, keepalive: float = KEEPALIVE_SECONDS):
    """Generate SSE events for comments inserted on a photo.

    Args:
        store: Comment store to subscribe on.
        photo_id: Photo to stream.
        keepalive: Seconds of silence after which a comment line is sent.

    Yields:
        SSE formatted event strings.
    """
    queue: asyncio.Queue = asyncio.Queue()
    subscription = await store.subscribe_inserts(photo_id, lambda c: queue.put_nowait(comment_event(c)))
    try:
        while True:
            try:
                data = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield f"data: {json.dumps(data, ensure_ascii=False)}\n\n"
    except asyncio.CancelledError:
        pass
    finally:
        try:
            await store.unsubscribe(subscription)
        except Exception as e:
            logger.warning(f"Failed to release SSE subscription on {photo_id}: {e}")
