"""
Data models shared by the store, the host view and the API.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

from datetime import datetime
from typing import Any, Dict, NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class BubblePoint(NamedTuple):
    """A bubble centre on the canvas, in percent of canvas height/width."""

    top: float
    left: float


class Comment(BaseModel):
    """A guest comment on one photo. Immutable once stored."""

    model_config = ConfigDict(frozen=True)

    id: str
    photo_id: str
    text: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert comment to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "photo_id": self.photo_id,
            "text": self.text,
            "created_at": self.created_at.isoformat(),
        }


class BubblePosition(BaseModel):
    """Persisted override of a bubble position, one per comment."""

    comment_id: str
    photo_id: str
    top: float = Field(ge=0, le=100)
    left: float = Field(ge=0, le=100)

    @property
    def point(self) -> BubblePoint:
        return BubblePoint(self.top, self.left)

    def to_dict(self) -> Dict[str, Any]:
        """Convert position to the row layout used by the store."""
        return {
            "comment_id": self.comment_id,
            "photo_id": self.photo_id,
            "top_pct": self.top,
            "left_pct": self.left,
        }


class CommentCreate(BaseModel):
    """Request model for a guest comment submission."""

    text: str


class PositionUpdate(BaseModel):
    """Request model for moving a bubble."""

    top: float
    left: float
