# src/kindred/models/__init__.py
"""SQLAlchemy models for the Kindred application."""

from .comment import Comment, CommentLike
from .follow import Follow
from .like import Like, ReactionType
from .post import MediaType, Post, PostStatus
from .profile import Profile
from .story import Story

__all__ = [
    "Comment", "CommentLike",
    "Follow",
    "Like", "ReactionType",
    "MediaType", "Post", "PostStatus",
    "Profile",
    "Story",
]
