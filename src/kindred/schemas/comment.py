"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from kindred.schemas.common import AuthorSummary


class CommentCreate(BaseModel):
    """Schema for creating a comment or a reply."""

    post_id: str
    content: str = Field(..., max_length=2000)
    parent_id: str | None = Field(None, description="Top-level comment being replied to")


class CommentUpdate(BaseModel):
    """Schema for editing a comment's text."""

    content: str = Field(..., max_length=2000)


class CommentResponse(BaseModel):
    """Stored comment returned by the API."""

    id: str
    post_id: str
    author_id: str
    parent_id: str | None
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentThread(CommentResponse):
    """Comment with author, like count and (for top-level comments) its replies."""

    author: AuthorSummary
    like_count: int = 0
    replies: list[CommentThread] = Field(default_factory=list)
    replies_count: int = 0


class CommentLikeState(BaseModel):
    """Like count on a comment and whether the viewer liked it."""

    comment_id: str
    like_count: int
    is_liked: bool
