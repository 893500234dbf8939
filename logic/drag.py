"""
Drag interaction controller.

Translates pointer gestures on the host canvas into bubble moves and saves
the final position when the gesture ends. One bubble at most is dragged per
canvas at a time.

State machine per bubble: Idle -> Dragging (pointer_down) -> Idle (pointer_up).

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-18
"""

import asyncio
from typing import Awaitable, Callable, NamedTuple, Optional, Set

from loguru import logger

from .models import BubblePoint
from .positions import PositionStateManager

PersistFn = Callable[[str, BubblePoint], Awaitable[None]]


class PointerEvent(NamedTuple):
    """Pointer position in client (viewport) pixels."""

    pointer_id: int
    client_x: float
    client_y: float


class CanvasRect(NamedTuple):
    """Bounding box of the canvas in client pixels."""

    left: float
    top: float
    width: float
    height: float


def pointer_to_percent(event: PointerEvent, rect: CanvasRect) -> Optional[BubblePoint]:
    """Convert a pointer position to raw (unclamped) canvas percentages.

    Returns:
        BubblePoint, or None if the canvas has no area.
    """
    if rect.width <= 0 or rect.height <= 0:
        return None
    top = (event.client_y - rect.top) / rect.height * 100
    left = (event.client_x - rect.left) / rect.width * 100
    return BubblePoint(top, left)


class DragController:
    """Pointer handling for the bubbles of one canvas.

    Attributes:
        positions: Position state of the canvas.
        persist: Coroutine called with the final position on release.
        active_id: Comment currently being dragged, if any.
        pointer_id: Pointer that owns the capture while dragging.
    """

    def __init__(self, positions: PositionStateManager, persist: PersistFn):
        self.positions = positions
        self.persist = persist
        self.active_id: Optional[str] = None
        self.pointer_id: Optional[int] = None
        self._pending: Set[asyncio.Task] = set()

    @property
    def dragging(self) -> bool:
        return self.active_id is not None

    def is_paused(self, comment_id: str) -> bool:
        """Float animation is paused only for the bubble being dragged."""
        return self.active_id == comment_id

    def _owns_capture(self, comment_id: str, event: PointerEvent) -> bool:
        return self.active_id == comment_id and self.pointer_id == event.pointer_id

    def _apply(self, comment_id: str, event: PointerEvent, rect: CanvasRect) -> BubblePoint:
        raw = pointer_to_percent(event, rect)
        if raw is None:
            return self.positions.position_of(comment_id)
        return self.positions.set_position(comment_id, raw.top, raw.left)

    def pointer_down(self, comment_id: str, event: PointerEvent, rect: CanvasRect) -> Optional[BubblePoint]:
        """Start dragging a bubble.

        Ignored while another drag is in progress.

        Returns:
            The bubble's new position, or None if the gesture was ignored.
        """
        if self.dragging:
            logger.debug(f"Ignoring pointer_down on {comment_id}: {self.active_id} is being dragged")
            return None
        self.positions.bring_to_front(comment_id)
        self.active_id = comment_id
        self.pointer_id = event.pointer_id
        return self._apply(comment_id, event, rect)

    def pointer_move(self, comment_id: str, event: PointerEvent, rect: CanvasRect) -> Optional[BubblePoint]:
        """Follow the pointer while it owns the capture."""
        if not self._owns_capture(comment_id, event):
            return None
        return self._apply(comment_id, event, rect)

    def pointer_up(self, comment_id: str, event: PointerEvent) -> Optional[BubblePoint]:
        """Finish a drag and save the bubble's clamped position in the background.

        Returns:
            The final position, or None if this bubble was not being dragged.
        """
        if not self._owns_capture(comment_id, event):
            return None
        self.active_id = None
        self.pointer_id = None

        point = self.positions.position_of(comment_id)
        if point is not None:
            task = asyncio.ensure_future(self.persist(comment_id, point))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        return point

    def click(self, comment_id: str) -> int:
        """Bring a bubble to the front without moving it."""
        return self.positions.bring_to_front(comment_id)

    def cancel(self):
        """Drop the active drag without saving it."""
        self.active_id = None
        self.pointer_id = None

    def reset(self, positions: PositionStateManager, persist: PersistFn):
        """Point the controller at a new canvas. Saves already started keep running."""
        self.cancel()
        self.positions = positions
        self.persist = persist

    async def drain(self):
        """Wait for all background saves started so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
