"""Story-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from kindred.models import MediaType
from kindred.schemas.common import AuthorSummary


class StoryCreate(BaseModel):
    """Schema for creating a story; content or media is required."""

    content: str | None = Field(None, max_length=500)
    media_url: str | None = None
    media_type: MediaType | None = None
    background_color: str | None = None
    text_color: str | None = None


class StoryResponse(BaseModel):
    """Stored story returned by the API."""

    id: str
    author_id: str
    content: str | None
    media_url: str | None
    media_type: MediaType | None
    background_color: str
    text_color: str
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StoryWithAuthor(StoryResponse):
    """Story enriched with its author's profile."""

    author: AuthorSummary
