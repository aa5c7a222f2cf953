"""Models capturing typed reactions on posts."""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from kindred.db.session import Base
from kindred.db.time import utcnow
from kindred.models._ids import new_id


class ReactionType(str, Enum):
    """The seven reaction kinds a user can leave on a post."""

    LIKE = "like"
    LOVE = "love"
    HAHA = "haha"
    WOW = "wow"
    SAD = "sad"
    ANGRY = "angry"
    CARE = "care"


class Like(Base):
    """Per-user reaction on a post.

    The unique constraint keeps at most one reaction per (user, post); changing
    the reaction updates ``reaction_type`` in place.
    """

    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_likes_user_post"),
        CheckConstraint(
            "reaction_type IN ('like', 'love', 'haha', 'wow', 'sad', 'angry', 'care')",
            name="ck_likes_reaction_type",
        ),
        Index("ix_likes_post_id", "post_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    reaction_type: Mapped[str] = mapped_column(String(16), nullable=False, default="like")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
