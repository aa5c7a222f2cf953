"""Profile and follow-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProfileStats(BaseModel):
    """Aggregate counts shown on a profile."""

    posts_count: int = 0
    followers_count: int = 0
    following_count: int = 0


class ProfileResponse(BaseModel):
    """Profile information returned by the API."""

    id: str
    full_name: str
    phone: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    cover_image_url: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileDetail(ProfileResponse):
    """Profile with stats and the viewer's follow state."""

    stats: ProfileStats
    is_following: bool = False


class ProfileUpdate(BaseModel):
    """Partial update of the caller's own profile."""

    full_name: str | None = Field(None, min_length=1, max_length=120)
    phone: str | None = Field(None, max_length=32)
    avatar_url: str | None = None
    cover_image_url: str | None = None


class FollowEntry(BaseModel):
    """A user in a followers/following list."""

    id: str
    full_name: str | None = None
    avatar_url: str | None = None
    is_following: bool = False


class FollowState(BaseModel):
    """Result of a follow or unfollow request."""

    user_id: str
    is_following: bool
    followers_count: int
