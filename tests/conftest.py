"""Shared fixtures: an in-memory comment store and a quiet test config."""

import asyncio
import itertools
from datetime import timedelta
from typing import Dict, List

import pytest

from logic.config import get_default_config
from logic.models import BubblePosition, Comment
from logic.store import CommentStoreError, InsertFeed
from tests.helpers import BASE_TIME


class FakeCommentStore:
    """In-memory CommentStore with switchable failures and call recording."""

    def __init__(self):
        self.comments: List[Comment] = []
        self.positions: Dict[str, BubblePosition] = {}
        self.feed = InsertFeed()
        self.upserts: List[BubblePosition] = []
        self.fail_reads = False
        self.fail_inserts = False
        self.upsert_failures = 0
        self.subscribe_failures = 0
        self.unsubscribed = []
        # Seconds unsubscribe takes, like a remote round trip
        self.unsubscribe_delay = 0
        # photo_id -> Event that list_comments waits on before answering
        self.comment_gates: Dict[str, asyncio.Event] = {}
        self._ids = itertools.count(1)

    def add(self, photo_id: str, text: str, comment_id: str = None) -> Comment:
        """Seed a comment without notifying subscribers."""
        n = next(self._ids)
        comment = Comment(
            id=comment_id or f"c{n}",
            photo_id=photo_id,
            text=text,
            created_at=BASE_TIME + timedelta(minutes=n),
        )
        self.comments.append(comment)
        return comment

    async def insert_comment(self, photo_id: str, text: str) -> Comment:
        if self.fail_inserts:
            raise CommentStoreError("insert rejected")
        comment = self.add(photo_id, text)
        self.feed.publish(comment)
        return comment

    async def list_comments(self, photo_id: str) -> List[Comment]:
        gate = self.comment_gates.get(photo_id)
        if gate is not None:
            await gate.wait()
        if self.fail_reads:
            raise CommentStoreError("read failed")
        rows = [c for c in self.comments if c.photo_id == photo_id]
        return sorted(rows, key=lambda c: c.created_at, reverse=True)

    async def list_positions(self, photo_id: str) -> List[BubblePosition]:
        if self.fail_reads:
            raise CommentStoreError("read failed")
        return [p for p in self.positions.values() if p.photo_id == photo_id]

    async def upsert_position(self, position: BubblePosition) -> None:
        if self.upsert_failures > 0:
            self.upsert_failures -= 1
            raise CommentStoreError("upsert failed")
        self.upserts.append(position)
        self.positions[position.comment_id] = position

    async def subscribe_inserts(self, photo_id, on_insert):
        if self.subscribe_failures > 0:
            self.subscribe_failures -= 1
            raise CommentStoreError("realtime unavailable")
        return self.feed.subscribe(photo_id, on_insert)

    async def unsubscribe(self, subscription) -> None:
        self.unsubscribed.append(subscription)
        if self.unsubscribe_delay:
            await asyncio.sleep(self.unsubscribe_delay)
        self.feed.unsubscribe(subscription)


@pytest.fixture
def store():
    return FakeCommentStore()


@pytest.fixture
def config():
    """Default config with instant retries."""
    config = get_default_config()
    for key in ("upsert_retry", "subscribe_retry"):
        config[key] = {"attempts": 3, "base_delay": 0, "max_delay": 0}
    return config
