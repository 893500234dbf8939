"""
Bubble position and stacking state.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-18
"""

from typing import Dict, Iterable, List, Optional

from .models import BubblePoint, BubblePosition, Comment
from .placement import DEFAULT_BAND, PLACEMENT_SALT, SafeBand, placement


class UnknownBubbleError(KeyError):
    """Raised when a bubble operation targets a comment that is not displayed."""


class PositionStateManager:
    """In-memory positions and stacking order for one image's bubbles.

    Each displayed comment has exactly one position and one stack value.
    The stack counter belongs to the instance, so independent canvases
    never share z-order.

    Attributes:
        band: Safe band positions are clamped into.
        salt: Placement salt for the horizontal coordinate.
    """

    def __init__(self, band: SafeBand = DEFAULT_BAND, salt: str = PLACEMENT_SALT):
        self.band = band
        self.salt = salt
        self._positions: Dict[str, BubblePoint] = {}
        self._stack: Dict[str, int] = {}
        self._counter = 0

    def __contains__(self, comment_id: str) -> bool:
        return comment_id in self._stack

    def __len__(self) -> int:
        return len(self._stack)

    def _next_stack_value(self) -> int:
        self._counter += 1
        return self._counter

    def ensure_initialized(self, comments: Iterable[Comment]) -> List[str]:
        """Give every new comment a default position and a stack value.

        Existing entries are left untouched, so repeated calls are no-ops.

        Args:
            comments: Comments currently displayed.

        Returns:
            IDs of comments that received a new stack entry.
        """
        added = []
        for comment in comments:
            if comment.id not in self._positions:
                self._positions[comment.id] = placement(comment.id, self.band, self.salt)
            if comment.id not in self._stack:
                self._stack[comment.id] = self._next_stack_value()
                added.append(comment.id)
        return added

    def merge_persisted(self, rows: Iterable[BubblePosition]) -> List[str]:
        """Overwrite positions with persisted overrides.

        Only the comments named in ``rows`` are touched.

        Args:
            rows: Persisted positions for the current photo.

        Returns:
            IDs whose position was overwritten.
        """
        merged = []
        for row in rows:
            self._positions[row.comment_id] = row.point
            merged.append(row.comment_id)
        return merged

    def set_position(self, comment_id: str, top: float, left: float) -> BubblePoint:
        """Move a bubble, clamping both coordinates into the safe band.

        Raises:
            UnknownBubbleError: If the comment is not displayed.
        """
        if comment_id not in self._stack:
            raise UnknownBubbleError(comment_id)
        point = BubblePoint(self.band.clamp(top), self.band.clamp(left))
        self._positions[comment_id] = point
        return point

    def bring_to_front(self, comment_id: str) -> int:
        """Give a bubble the highest stack value issued so far.

        Raises:
            UnknownBubbleError: If the comment is not displayed.
        """
        if comment_id not in self._stack:
            raise UnknownBubbleError(comment_id)
        value = self._next_stack_value()
        self._stack[comment_id] = value
        return value

    def position_of(self, comment_id: str) -> Optional[BubblePoint]:
        return self._positions.get(comment_id)

    def stack_order_of(self, comment_id: str) -> Optional[int]:
        return self._stack.get(comment_id)

    @property
    def top_stack_value(self) -> int:
        return self._counter

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        """Get positions and stack values of all displayed bubbles.

        Returns:
            Dictionary mapping comment id to ``{"top", "left", "z"}``.
        """
        return {
            comment_id: {
                "top": self._positions[comment_id].top,
                "left": self._positions[comment_id].left,
                "z": z,
            }
            for comment_id, z in self._stack.items()
        }
