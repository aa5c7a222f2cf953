"""Version 1 API endpoints."""

from .endpoints import (
    comments_router,
    posts_router,
    reactions_router,
    stories_router,
    users_router,
)

__all__ = [
    "posts_router",
    "reactions_router",
    "comments_router",
    "stories_router",
    "users_router",
]
