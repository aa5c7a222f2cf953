"""Reaction-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from kindred.models import ReactionType
from kindred.schemas.post import ReactionCounts


class ReactionRequest(BaseModel):
    """Set or toggle the caller's reaction on a post.

    Without ``reaction_type`` the request behaves like the quick "like"
    button: any existing reaction is removed, otherwise a ``like`` is added.
    """

    reaction_type: ReactionType | None = Field(None, description="Reaction to set")


class ReactionSummary(BaseModel):
    """Reaction counts on a post plus the viewer's own reaction."""

    post_id: str
    reactions_count: ReactionCounts
    total: int
    user_reaction: ReactionType | None = None


class ReactionResult(ReactionSummary):
    """Outcome of a reaction request."""

    action: Literal["added", "updated", "removed"]
