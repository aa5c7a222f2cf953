"""Ephemeral stories.

Expiry is enforced on read: a story whose ``expires_at`` has passed is never
listed, whether or not the cleanup job has removed it yet.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kindred.core.errors import ForbiddenError, InvalidInputError, NotFoundError, StorageError
from kindred.core.settings import settings
from kindred.db.time import utcnow
from kindred.models import Story
from kindred.schemas.story import StoryCreate, StoryResponse, StoryWithAuthor
from kindred.services.feed import author_summaries

logger = logging.getLogger(__name__)


def create_story(
    db: Session,
    user_id: str,
    data: StoryCreate,
    *,
    now: datetime | None = None,
) -> StoryResponse:
    """Create a story that expires ``STORY_TTL_HOURS`` after creation.

    Raises:
        InvalidInputError: If neither text nor media is present.
        StorageError: If the write fails.
    """
    content = (data.content or "").strip()
    if not content and not data.media_url:
        raise InvalidInputError("Story content or media is required")
    if data.media_url and data.media_type is None:
        raise InvalidInputError("media_type is required when media_url is set")

    created_at = now or utcnow()
    story = Story(
        author_id=user_id,
        content=content or None,
        media_url=data.media_url,
        media_type=data.media_type.value if data.media_type else None,
        background_color=data.background_color or settings.default_background_color,
        text_color=data.text_color or settings.default_text_color,
        created_at=created_at,
        expires_at=created_at + timedelta(hours=settings.story_ttl_hours),
    )
    db.add(story)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to create story") from exc
    db.refresh(story)
    return StoryResponse.model_validate(story)


def list_active_stories(db: Session, *, now: datetime | None = None) -> list[StoryWithAuthor]:
    """Return unexpired stories newest first, each with its author."""
    stories = list(
        db.scalars(
            select(Story)
            .where(Story.expires_at > (now or utcnow()))
            .order_by(Story.created_at.desc())
        )
    )
    authors = author_summaries(db, (story.author_id for story in stories))
    return [
        StoryWithAuthor(
            **StoryResponse.model_validate(story).model_dump(),
            author=authors[story.author_id],
        )
        for story in stories
    ]


def delete_story(db: Session, story_id: str, user_id: str) -> None:
    """Delete the caller's own story.

    Raises:
        NotFoundError: If the story does not exist.
        ForbiddenError: If the caller is not its author.
    """
    story = db.get(Story, story_id)
    if story is None:
        raise NotFoundError("Story not found")
    if story.author_id != user_id:
        raise ForbiddenError("You can only delete your own stories")
    db.delete(story)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to delete story") from exc


def cleanup_expired_stories(db: Session, now: datetime | None = None) -> int:
    """Delete every expired story and return how many rows went.

    Running it again, or alongside readers, is harmless: the delete is a
    single statement and readers already filter on ``expires_at``.
    """
    cutoff = now or utcnow()
    try:
        result = db.execute(delete(Story).where(Story.expires_at <= cutoff))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to clean up expired stories") from exc
    removed = result.rowcount or 0
    logger.info("Removed %d expired stories", removed)
    return removed
