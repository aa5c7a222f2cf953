"""Data access helpers for working with posts."""
from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from kindred.models import Comment, CommentLike, Like, Post

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: str) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    def list_recent(
        self,
        *,
        author_id: str | None = None,
        since: datetime | None = None,
    ) -> list[Post]:
        """Return raw post rows, newest first, optionally narrowed by author or age.

        Rows are not filtered by status; callers apply a ``VisibilityPolicy``.
        """
        stmt = select(Post)
        if author_id is not None:
            stmt = stmt.where(Post.author_id == author_id)
        if since is not None:
            stmt = stmt.where(Post.created_at >= since)
        stmt = stmt.order_by(Post.created_at.desc(), Post.id)
        return list(self.session.scalars(stmt))

    def create(self, **fields: Any) -> Post:
        """Insert a new post and return the flushed ORM instance."""
        post = Post(**fields)
        self.session.add(post)
        self.session.flush()
        return post

    def delete_with_dependents(self, post: Post) -> None:
        """Delete a post together with its reactions, comments and comment likes."""
        comment_ids = select(Comment.id).where(Comment.post_id == post.id)
        self.session.execute(delete(CommentLike).where(CommentLike.comment_id.in_(comment_ids)))
        # Replies first so the self-referencing FK never dangles.
        self.session.execute(
            delete(Comment).where(Comment.post_id == post.id, Comment.parent_id.is_not(None))
        )
        self.session.execute(delete(Comment).where(Comment.post_id == post.id))
        self.session.execute(delete(Like).where(Like.post_id == post.id))
        self.session.delete(post)
        self.session.flush()

    def reactions_for(self, post_ids: Sequence[str]) -> list[Like]:
        """Return every reaction row on the given posts."""
        if not post_ids:
            return []
        return list(self.session.scalars(select(Like).where(Like.post_id.in_(post_ids))))

    def top_level_comment_counts(self, post_ids: Sequence[str]) -> Counter[str]:
        """Return the number of top-level comments per post."""
        if not post_ids:
            return Counter()
        rows = self.session.execute(
            select(Comment.post_id, func.count())
            .where(Comment.post_id.in_(post_ids), Comment.parent_id.is_(None))
            .group_by(Comment.post_id)
        )
        return Counter({post_id: int(count) for post_id, count in rows})
