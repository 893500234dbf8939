"""Database setup, models and the SQL-backed comment store.

This module provides the database connection, the ``comments`` and
``comment_positions`` tables, and ``SqlCommentStore``, which implements the
comment store interface using SQLAlchemy with an in-process insert feed.
"""

import asyncio
import os
import uuid
from datetime import datetime, timezone
from typing import List

from loguru import logger
from sqlalchemy import create_engine, Column, Float, String, Text, DateTime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from logic.models import BubblePosition, Comment
from logic.store import CommentStoreError, InsertCallback, InsertFeed, Subscription

# Database setup
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./comment_canvas.db")


def make_engine(url: str = DATABASE_URL):
    """Create an engine, allowing SQLite connections to cross threads."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommentRow(Base):
    """Guest comment on a photo.

    Attributes:
        id: UUID string primary key.
        photo_id: Catalog id of the photo commented on.
        text: Comment body.
        created_at: Insertion time (UTC).
    """

    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    photo_id = Column(String(50), nullable=False, index=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)

    def to_model(self) -> Comment:
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Comment(id=self.id, photo_id=self.photo_id, text=self.text, created_at=created_at)


class PositionRow(Base):
    """Saved bubble position, one row per comment.

    Attributes:
        comment_id: Comment the position belongs to (primary key).
        photo_id: Photo the comment belongs to.
        top_pct: Vertical position in percent of canvas height.
        left_pct: Horizontal position in percent of canvas width.
        updated_at: Time of the last upsert (UTC).
    """

    __tablename__ = "comment_positions"

    comment_id = Column(String(36), primary_key=True)
    photo_id = Column(String(50), nullable=False, index=True)
    top_pct = Column(Float, nullable=False)
    left_pct = Column(Float, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def to_model(self) -> BubblePosition:
        return BubblePosition(
            comment_id=self.comment_id,
            photo_id=self.photo_id,
            top=self.top_pct,
            left=self.left_pct,
        )


def init_db(bind=None):
    """Initialize the database by creating all tables."""
    Base.metadata.create_all(bind=bind or engine)


class SqlCommentStore:
    """Comment store backed by a SQL database.

    Blocking session work runs in a worker thread so the event loop never
    waits on the database. Inserts are published to ``feed`` after commit.

    Attributes:
        session_factory: Callable returning a new Session.
        feed: Insert fan-out for subscribers in this process.
    """

    def __init__(self, session_factory=SessionLocal, feed: InsertFeed = None):
        self.session_factory = session_factory
        self.feed = feed or InsertFeed()

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except SQLAlchemyError as e:
            raise CommentStoreError(str(e)) from e

    # ==========================
    # Comments
    # ==========================
    def _insert_comment(self, photo_id: str, text: str) -> Comment:
        with self.session_factory() as db:
            row = CommentRow(id=str(uuid.uuid4()), photo_id=photo_id, text=text, created_at=_utcnow())
            db.add(row)
            db.commit()
            db.refresh(row)
            return row.to_model()

    async def insert_comment(self, photo_id: str, text: str) -> Comment:
        comment = await self._run(self._insert_comment, photo_id, text)
        logger.info(f"Stored comment {comment.id} on photo {photo_id}")
        self.feed.publish(comment)
        return comment

    def _list_comments(self, photo_id: str) -> List[Comment]:
        with self.session_factory() as db:
            rows = (
                db.query(CommentRow)
                .filter(CommentRow.photo_id == photo_id)
                .order_by(CommentRow.created_at.desc(), CommentRow.id.desc())
                .all()
            )
            return [row.to_model() for row in rows]

    async def list_comments(self, photo_id: str) -> List[Comment]:
        return await self._run(self._list_comments, photo_id)

    # ==========================
    # Positions
    # ==========================
    def _list_positions(self, photo_id: str) -> List[BubblePosition]:
        with self.session_factory() as db:
            rows = db.query(PositionRow).filter(PositionRow.photo_id == photo_id).all()
            return [row.to_model() for row in rows]

    async def list_positions(self, photo_id: str) -> List[BubblePosition]:
        return await self._run(self._list_positions, photo_id)

    def _upsert_position(self, position: BubblePosition):
        with self.session_factory() as db:
            db.merge(PositionRow(
                comment_id=position.comment_id,
                photo_id=position.photo_id,
                top_pct=position.top,
                left_pct=position.left,
                updated_at=_utcnow(),
            ))
            db.commit()

    async def upsert_position(self, position: BubblePosition) -> None:
        await self._run(self._upsert_position, position)

    # ==========================
    # Subscriptions
    # ==========================
    async def subscribe_inserts(self, photo_id: str, on_insert: InsertCallback) -> Subscription:
        return self.feed.subscribe(photo_id, on_insert)

    async def unsubscribe(self, subscription: Subscription) -> None:
        self.feed.unsubscribe(subscription)
