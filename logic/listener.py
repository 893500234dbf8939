"""
Live update listener.

Keeps a host display current by subscribing to comment inserts for one photo.
The subscription is a scoped resource: use ``async with`` or call ``close()``
on every exit path.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-19
"""

from typing import Callable, Optional

from loguru import logger

from .models import Comment
from .retry import NO_RETRY, RetryPolicy, retry_async
from .store import CommentStore, Subscription


class LiveUpdateListener:
    """Insert subscription for one photo.

    Attributes:
        store: Comment store to subscribe on.
        photo_id: Photo to listen to.
        on_comment: Called with each new comment while the listener is open.
        policy: Retry policy for establishing the subscription.
    """

    def __init__(
            self,
            store: CommentStore,
            photo_id: str,
            on_comment: Callable[[Comment], None],
            policy: RetryPolicy = NO_RETRY,
    ):
        self.store = store
        self.photo_id = photo_id
        self.on_comment = on_comment
        self.policy = policy
        self.subscription: Optional[Subscription] = None
        self._closed = False

    @property
    def active(self) -> bool:
        return self.subscription is not None and not self._closed

    async def __aenter__(self) -> "LiveUpdateListener":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _deliver(self, comment: Comment):
        if self._closed or comment.photo_id != self.photo_id:
            return
        self.on_comment(comment)

    async def start(self):
        """Subscribe, retrying with backoff.

        Raises:
            Exception: The store's error once all attempts have failed.
        """
        subscription = await retry_async(
            lambda: self.store.subscribe_inserts(self.photo_id, self._deliver),
            self.policy,
            f"Subscribing to comments on {self.photo_id}",
        )
        if self._closed:
            # Closed while the subscription was being set up
            await self._release(subscription)
            return
        self.subscription = subscription
        logger.debug(f"Listening for comments on {self.photo_id}")

    async def close(self):
        """Release the subscription. Safe to call more than once."""
        self._closed = True
        subscription, self.subscription = self.subscription, None
        if subscription is not None:
            await self._release(subscription)

    async def _release(self, subscription: Subscription):
        try:
            await self.store.unsubscribe(subscription)
        except Exception as e:
            logger.warning(f"Failed to unsubscribe from {self.photo_id}: {e}")
