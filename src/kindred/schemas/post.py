# src/kindred/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from kindred.models import MediaType, PostStatus, ReactionType
from kindred.schemas.common import AuthorSummary

TrendingWindow = Literal["today", "week", "month"]


class PostCreate(BaseModel):
    """Schema for submitting a new post.

    ``content`` may be empty when ``media_url`` is supplied; the submission
    controller enforces that at least one of them is present.
    """

    content: str = Field("", max_length=5000, description="Body text")
    title: str | None = Field(None, max_length=300)
    media_url: str | None = None
    media_type: MediaType | None = None
    feeling: str | None = Field(None, max_length=64, description="Short symbolic label")
    background_color: str | None = None
    text_color: str | None = None


class PostResponse(BaseModel):
    """Stored post record returned by the API."""

    id: str
    author_id: str
    content: str
    title: str | None
    media_url: str | None
    media_type: MediaType | None
    feeling: str | None
    background_color: str
    text_color: str
    status: PostStatus
    moderation_result: dict[str, Any]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReactionCounts(BaseModel):
    """Number of reactions of each kind on one post."""

    like: int = 0
    love: int = 0
    haha: int = 0
    wow: int = 0
    sad: int = 0
    angry: int = 0
    care: int = 0

    @property
    def total(self) -> int:
        """Return the number of reactions across all kinds."""
        return sum(self.model_dump().values())


class FeedPost(PostResponse):
    """Post enriched for display on read paths."""

    author: AuthorSummary
    reactions_count: ReactionCounts
    likes_count: int
    user_reaction: ReactionType | None = None
    comments_count: int = 0


class RejectedPost(FeedPost):
    """Post shown on the owner's rejected view with the reasons it was flagged."""

    rejection_reasons: list[str]


class RankedPost(FeedPost):
    """Post ranked by the popular or trending views."""

    rank: int
    score: int
