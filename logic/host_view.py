"""
Host display session.

Ties together the comment list, bubble positions, drag handling and live
updates for the photo currently shown on a host display.

Loading a photo:
- Subscribe to inserts first so nothing posted during the fetch is missed
- Fetch comments (newest first) and give each a default position
- Fetch saved positions and let them override the defaults

Each live comment also triggers a fresh read of saved positions, so moves
made on other host displays show up here.

Switching photos bumps a generation counter; anything still in flight for
the previous photo is discarded when it resolves.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-19
"""

import asyncio
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Set

from loguru import logger

from .config import load_config
from .drag import CanvasRect, DragController, PointerEvent
from .listener import LiveUpdateListener
from .models import BubblePoint, BubblePosition, Comment
from .placement import band_from_config, float_timing
from .positions import PositionStateManager
from .retry import RetryPolicy, retry_async
from .store import CommentStore

ChangeCallback = Callable[[str, Dict[str, Any]], None]


class FetchResult(NamedTuple):
    """Result of a read path; ``ok`` is False when the fetch failed."""

    items: list
    ok: bool


def _ignore_change(kind: str, payload: Dict[str, Any]):
    pass


class HostPictureView:
    """Headless model of the host display for one photo at a time.

    Attributes:
        store: Comment store.
        photo_id: Photo currently shown, or None before the first ``show``.
        comments: Displayed comments, newest first, unique by id.
        positions: Position state for the current photo.
        drag: Drag controller for the current photo.
        loading: True until the first comment fetch for the photo resolves.
        on_change: Called with ``(kind, payload)`` when live data changes the view.
    """

    def __init__(
            self,
            store: CommentStore,
            config: Optional[Dict[str, Any]] = None,
            on_change: Optional[ChangeCallback] = None,
    ):
        config = config if config is not None else load_config()
        self.store = store
        self.band = band_from_config(config)
        self.salt = config.get("placement_salt", "x")
        self.upsert_policy = RetryPolicy.from_config(config.get("upsert_retry"))
        self.subscribe_policy = RetryPolicy.from_config(config.get("subscribe_retry"))
        self.on_change = on_change or _ignore_change

        self.photo_id: Optional[str] = None
        self.comments: List[Comment] = []
        self._comment_ids = set()
        self.positions = PositionStateManager(self.band, self.salt)
        self.drag = DragController(self.positions, self._persist_disabled)
        self.listener: Optional[LiveUpdateListener] = None
        self.loading = False
        self.last_comment_fetch = FetchResult([], True)
        self.last_position_fetch = FetchResult([], True)
        self._generation = 0
        self._refreshes: Set[asyncio.Task] = set()

    # ==========================
    # Lifecycle
    # ==========================
    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def show(self, photo_id: str):
        """Switch the display to a photo and load its comments and positions."""
        self._generation += 1
        generation = self._generation
        previous, self.listener = self.listener, None

        self.photo_id = photo_id
        self.comments = []
        self._comment_ids = set()
        self.positions = PositionStateManager(self.band, self.salt)
        self.drag.reset(self.positions, partial(self._persist, photo_id))
        self.loading = True

        # Whoever replaces self.listener later is responsible for closing it
        listener = LiveUpdateListener(
            self.store, photo_id, partial(self._on_insert, generation), self.subscribe_policy
        )
        self.listener = listener

        if previous is not None:
            await previous.close()
        if not self._is_current(generation):
            return

        try:
            await listener.start()
        except Exception as e:
            logger.error(f"Live updates unavailable for {photo_id}: {e}")
        if not self._is_current(generation):
            return

        fetched = await self._fetch_comments(photo_id)
        if not self._is_current(generation):
            logger.debug(f"Discarding stale comment fetch for {photo_id}")
            return
        self.last_comment_fetch = fetched
        self._merge_fetched(fetched.items)
        self.loading = False

        saved = await self._fetch_positions(photo_id)
        if not self._is_current(generation):
            logger.debug(f"Discarding stale position fetch for {photo_id}")
            return
        self.last_position_fetch = saved
        self._merge_saved(photo_id, saved.items)
        self.on_change("state", self.state())

    async def dispose(self):
        """Tear the view down: stop listening and let pending work finish."""
        self._generation += 1
        self.drag.cancel()
        listener, self.listener = self.listener, None
        if listener is not None:
            await listener.close()
        await self.settle()

    async def settle(self):
        """Wait for background position refreshes and saves started so far."""
        if self._refreshes:
            await asyncio.gather(*list(self._refreshes), return_exceptions=True)
        await self.drag.drain()

    # ==========================
    # Remote reads
    # ==========================
    async def _fetch_comments(self, photo_id: str) -> FetchResult:
        try:
            return FetchResult(await self.store.list_comments(photo_id), True)
        except Exception as e:
            logger.warning(f"Listing comments for {photo_id} failed: {e}")
            return FetchResult([], False)

    async def _fetch_positions(self, photo_id: str) -> FetchResult:
        try:
            return FetchResult(await self.store.list_positions(photo_id), True)
        except Exception as e:
            logger.warning(f"Listing positions for {photo_id} failed: {e}")
            return FetchResult([], False)

    # ==========================
    # Comment list
    # ==========================
    def _merge_fetched(self, fetched: List[Comment]):
        # Live arrivals received during the fetch are newer than anything in it
        live = self.comments
        self.comments = []
        self._comment_ids = set()
        for comment in live + list(fetched):
            if comment.id in self._comment_ids:
                continue
            self._comment_ids.add(comment.id)
            self.comments.append(comment)
        self.positions.ensure_initialized(self.comments)

    def _on_insert(self, generation: int, comment: Comment):
        if not self._is_current(generation) or comment.photo_id != self.photo_id:
            return
        if comment.id in self._comment_ids:
            return
        self._comment_ids.add(comment.id)
        self.comments.insert(0, comment)
        self.positions.ensure_initialized([comment])
        self.on_change("comment", self.bubble(comment))

        if self.loading:
            return
        # Other displays may have moved bubbles since the last fetch
        task = asyncio.ensure_future(self._refresh_positions(generation, comment.photo_id))
        self._refreshes.add(task)
        task.add_done_callback(self._refreshes.discard)

    async def _refresh_positions(self, generation: int, photo_id: str):
        saved = await self._fetch_positions(photo_id)
        if not self._is_current(generation) or not saved.ok:
            return
        self.last_position_fetch = saved
        self._merge_saved(photo_id, saved.items)
        self.on_change("state", self.state())

    def _merge_saved(self, photo_id: str, rows: Iterable[BubblePosition]):
        # The bubble under the pointer keeps following the pointer
        self.positions.merge_persisted(
            p for p in rows if p.photo_id == photo_id and not self.drag.is_paused(p.comment_id)
        )

    # ==========================
    # Persistence
    # ==========================
    async def _persist_disabled(self, comment_id: str, point: BubblePoint):
        logger.warning(f"Dropping position for {comment_id}: no photo shown")

    async def _persist(self, photo_id: str, comment_id: str, point: BubblePoint):
        try:
            position = BubblePosition(comment_id=comment_id, photo_id=photo_id, top=point.top, left=point.left)
            await retry_async(
                lambda: self.store.upsert_position(position),
                self.upsert_policy,
                f"Saving position of {comment_id}",
            )
        except Exception as e:
            logger.error(f"Giving up on saving position of {comment_id}: {e}")

    # ==========================
    # Interaction
    # ==========================
    def pointer_down(self, comment_id: str, event: PointerEvent, rect: CanvasRect) -> Optional[BubblePoint]:
        return self.drag.pointer_down(comment_id, event, rect)

    def pointer_move(self, comment_id: str, event: PointerEvent, rect: CanvasRect) -> Optional[BubblePoint]:
        return self.drag.pointer_move(comment_id, event, rect)

    def pointer_up(self, comment_id: str, event: PointerEvent) -> Optional[BubblePoint]:
        return self.drag.pointer_up(comment_id, event)

    def click(self, comment_id: str) -> int:
        return self.drag.click(comment_id)

    # ==========================
    # View model
    # ==========================
    def bubble(self, comment: Comment) -> Dict[str, Any]:
        """Get the render data for one comment bubble."""
        point = self.positions.position_of(comment.id)
        delay, duration = float_timing(comment.id)
        return {
            **comment.to_dict(),
            "top": point.top,
            "left": point.left,
            "z": self.positions.stack_order_of(comment.id),
            "paused": self.drag.is_paused(comment.id),
            "float_delay": delay,
            "float_duration": duration,
        }

    def bubbles(self) -> List[Dict[str, Any]]:
        """Get render data for all bubbles, newest comment first."""
        return [self.bubble(c) for c in self.comments]

    def state(self) -> Dict[str, Any]:
        return {
            "photo_id": self.photo_id,
            "loading": self.loading,
            "comments_ok": self.last_comment_fetch.ok,
            "bubbles": self.bubbles(),
        }
