"""Per-view visibility rules for posts.

Which posts a viewer may see depends on the view being rendered, not on a
single global predicate:

- ``PUBLIC`` (feed, popular, trending, anyone's user page): approved posts only,
  whoever is looking, the author included.
- ``OWNER`` (the viewer's own profile and recent posts): the viewer's posts that
  are not rejected.
- ``OWNER_REJECTED`` (the viewer's rejected-posts view): exactly the viewer's
  rejected posts.

The policy works on fully materialised rows and preserves their order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from kindred.core.errors import UnauthorizedError
from kindred.models.post import Post, PostStatus

PostT = TypeVar("PostT", bound=Post)


class AudienceContext(str, Enum):
    """Read path a post list is being produced for."""

    PUBLIC = "public"
    OWNER = "owner"
    OWNER_REJECTED = "owner_rejected"


@dataclass(frozen=True)
class VisibilityPolicy:
    """Admission rule for one audience context and one viewer."""

    audience: AudienceContext
    viewer_id: str | None = None

    def __post_init__(self) -> None:
        if self.audience is not AudienceContext.PUBLIC and not self.viewer_id:
            raise UnauthorizedError("Sign in to view your own posts")

    @classmethod
    def public(cls, viewer_id: str | None = None) -> VisibilityPolicy:
        return cls(AudienceContext.PUBLIC, viewer_id)

    @classmethod
    def owner(cls, viewer_id: str | None) -> VisibilityPolicy:
        return cls(AudienceContext.OWNER, viewer_id)

    @classmethod
    def owner_rejected(cls, viewer_id: str | None) -> VisibilityPolicy:
        return cls(AudienceContext.OWNER_REJECTED, viewer_id)

    def admits(self, post: Post) -> bool:
        """Return True if ``post`` may be shown in this context."""
        status = post.status
        if self.audience is AudienceContext.PUBLIC:
            return status == PostStatus.APPROVED.value

        if post.author_id != self.viewer_id:
            return False
        if self.audience is AudienceContext.OWNER:
            return status != PostStatus.REJECTED.value
        return status == PostStatus.REJECTED.value

    def apply(self, posts: Iterable[PostT]) -> list[PostT]:
        """Return the admitted rows in their original order."""
        return [post for post in posts if self.admits(post)]


def can_view_post(post: Post, viewer_id: str | None) -> bool:
    """Return True if a single post fetched by id may be shown to ``viewer_id``.

    Anyone sees approved posts; the author additionally sees their own
    pending and rejected posts through the owner views.
    """
    if VisibilityPolicy.public(viewer_id).admits(post):
        return True
    if not viewer_id:
        return False
    return VisibilityPolicy.owner(viewer_id).admits(post) or VisibilityPolicy.owner_rejected(
        viewer_id
    ).admits(post)
