"""API endpoint modules for version 1."""

from .comments import router as comments_router
from .posts import router as posts_router
from .reactions import router as reactions_router
from .stories import router as stories_router
from .users import router as users_router

__all__ = [
    "posts_router",
    "reactions_router",
    "comments_router",
    "stories_router",
    "users_router",
]
