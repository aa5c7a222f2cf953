"""Schemas shared across several resources."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body returned for every domain error."""

    error: str = Field(..., description="Human-readable error message")


class AuthorSummary(BaseModel):
    """Minimal author profile embedded in posts, comments and stories."""

    id: str
    full_name: str | None = None
    avatar_url: str | None = None
