"""SQLAlchemy model for ephemeral stories."""

from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kindred.db.session import Base
from kindred.db.time import utcnow
from kindred.models._ids import new_id


class Story(Base):
    """Time-boxed post-like unit, excluded from every read once ``expires_at`` passes."""

    __tablename__ = "stories"
    __table_args__ = (Index("ix_stories_expires_at", "expires_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    author_id: Mapped[str] = mapped_column(String(36), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    background_color: Mapped[str] = mapped_column(Text, nullable=False, default="white")
    text_color: Mapped[str] = mapped_column(Text, nullable=False, default="black")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
