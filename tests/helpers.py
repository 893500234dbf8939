"""Helpers tests."""

from datetime import datetime, timedelta, timezone

from logic.models import Comment

BASE_TIME = datetime(2025, 8, 6, 8, 15, tzinfo=timezone.utc)


def make_comments(*ids, photo_id: str = "l1"):
    """Build comments with the given ids, oldest first."""
    return [
        Comment(id=cid, photo_id=photo_id, text=f"comment {cid}", created_at=BASE_TIME + timedelta(minutes=i))
        for i, cid in enumerate(ids)
    ]
