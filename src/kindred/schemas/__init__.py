# src/kindred/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import (
    CommentCreate,
    CommentLikeState,
    CommentResponse,
    CommentThread,
    CommentUpdate,
)
from .common import AuthorSummary, ErrorResponse
from .moderation import Verdict
from .post import FeedPost, PostCreate, PostResponse, RankedPost, ReactionCounts, RejectedPost
from .reaction import ReactionRequest, ReactionResult, ReactionSummary
from .story import StoryCreate, StoryResponse, StoryWithAuthor
from .user import (
    FollowEntry,
    FollowState,
    ProfileDetail,
    ProfileResponse,
    ProfileStats,
    ProfileUpdate,
)

__all__ = [
    "AuthorSummary", "ErrorResponse",
    "CommentCreate", "CommentLikeState", "CommentResponse", "CommentThread", "CommentUpdate",
    "FeedPost", "PostCreate", "PostResponse", "RankedPost", "ReactionCounts", "RejectedPost",
    "ReactionRequest", "ReactionResult", "ReactionSummary",
    "StoryCreate", "StoryResponse", "StoryWithAuthor",
    "FollowEntry", "FollowState", "ProfileDetail", "ProfileResponse", "ProfileStats",
    "ProfileUpdate",
    "Verdict",
]
