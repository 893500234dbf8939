"""
Comment store interface and in-process insert feed.

The host view only talks to a ``CommentStore``: insert and list comments,
list and upsert bubble positions, and subscribe to inserts for one photo.
``InsertFeed`` is the fan-out used by store implementations that live in the
same process.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-18
"""

import itertools
from typing import Callable, Dict, List, Protocol

from loguru import logger

from .models import BubblePosition, Comment

InsertCallback = Callable[[Comment], None]


class CommentStoreError(Exception):
    """Raised when a store operation fails."""


class Subscription:
    """Handle for an insert subscription on one photo.

    Attributes:
        id: Unique handle id.
        photo_id: Photo the subscription is filtered on.
        callback: Called with each inserted comment.
        active: False once the subscription has been released.
    """

    _ids = itertools.count(1)

    def __init__(self, photo_id: str, callback: InsertCallback):
        self.id = next(self._ids)
        self.photo_id = photo_id
        self.callback = callback
        self.active = True

    def __repr__(self) -> str:
        state = "active" if self.active else "closed"
        return f"<Subscription #{self.id} photo={self.photo_id!r} {state}>"


class CommentStore(Protocol):
    """Remote data collaborator for comments and bubble positions."""

    async def insert_comment(self, photo_id: str, text: str) -> Comment:
        ...

    async def list_comments(self, photo_id: str) -> List[Comment]:
        """List comments for a photo, newest first."""
        ...

    async def list_positions(self, photo_id: str) -> List[BubblePosition]:
        ...

    async def upsert_position(self, position: BubblePosition) -> None:
        """Insert or replace the position keyed by comment id (last writer wins)."""
        ...

    async def subscribe_inserts(self, photo_id: str, on_insert: InsertCallback) -> Subscription:
        ...

    async def unsubscribe(self, subscription: Subscription) -> None:
        ...


class InsertFeed:
    """Fans inserted comments out to subscriptions filtered by photo id."""

    def __init__(self):
        self._subscriptions: Dict[str, Dict[int, Subscription]] = {}

    def subscribe(self, photo_id: str, callback: InsertCallback) -> Subscription:
        subscription = Subscription(photo_id, callback)
        self._subscriptions.setdefault(photo_id, {})[subscription.id] = subscription
        logger.debug(f"Subscribed {subscription!r}")
        return subscription

    def unsubscribe(self, subscription: Subscription):
        """Release a subscription. Releasing twice is a no-op."""
        subscription.active = False
        bucket = self._subscriptions.get(subscription.photo_id)
        if not bucket or bucket.pop(subscription.id, None) is None:
            return
        if not bucket:
            del self._subscriptions[subscription.photo_id]
        logger.debug(f"Unsubscribed {subscription!r}")

    def subscriber_count(self, photo_id: str) -> int:
        return len(self._subscriptions.get(photo_id, {}))

    def publish(self, comment: Comment):
        """Deliver a newly inserted comment to every subscriber of its photo.

        A failing callback is logged and does not stop delivery to the others.
        """
        for subscription in list(self._subscriptions.get(comment.photo_id, {}).values()):
            try:
                subscription.callback(comment)
            except Exception as e:
                logger.error(f"Insert callback for {subscription!r} failed: {e}")
