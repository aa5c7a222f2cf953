"""SQLAlchemy models for posts and their moderation state."""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kindred.db.session import Base
from kindred.db.time import utcnow
from kindred.models._ids import new_id


class PostStatus(str, Enum):
    """Publication state assigned once, at creation.

    ``PENDING`` is kept for a future manual-review tier; submission only ever
    produces ``APPROVED`` or ``REJECTED``.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MediaType(str, Enum):
    """Kind of media attached to a post or story."""

    IMAGE = "image"
    VIDEO = "video"


class Post(Base):
    """User-authored content unit.

    Posts are immutable after creation; the only lifecycle event is deletion
    by their author.
    """

    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_posts_status",
        ),
        CheckConstraint(
            "media_type IS NULL OR media_type IN ('image', 'video')",
            name="ck_posts_media_type",
        ),
        Index("ix_posts_author_id", "author_id"),
        Index("ix_posts_status_created_at", "status", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # Identity owned by the external identity provider; no FK on purpose.
    author_id: Mapped[str] = mapped_column(String(36), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    feeling: Mapped[str | None] = mapped_column(Text, nullable=True)
    background_color: Mapped[str] = mapped_column(Text, nullable=False, default="white")
    text_color: Mapped[str] = mapped_column(Text, nullable=False, default="black")

    status: Mapped[str] = mapped_column(String(16), nullable=False)
    # {"isToxic", "isSpam", "isProfane", "flagged"} as returned by the classifier.
    moderation_result: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
