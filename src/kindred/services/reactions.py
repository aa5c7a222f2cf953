"""Typed reactions on posts and binary likes on comments.

A user holds at most one reaction per post and at most one like per comment;
the unique constraints in the schema are the only concurrency control.
"""
from __future__ import annotations

import logging
from typing import Literal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from kindred.core.errors import NotFoundError, StorageError
from kindred.models import Comment, CommentLike, Like, ReactionType
from kindred.repositories.post_repo import PostRepository
from kindred.schemas.comment import CommentLikeState
from kindred.schemas.reaction import ReactionResult, ReactionSummary
from kindred.services.feed import count_reactions, get_visible_post

logger = logging.getLogger(__name__)

ReactionAction = Literal["added", "updated", "removed"]


def _find_reaction(db: Session, post_id: str, user_id: str) -> Like | None:
    return db.scalars(
        select(Like).where(Like.post_id == post_id, Like.user_id == user_id)
    ).first()


def reaction_summary(db: Session, post_id: str, viewer_id: str | None) -> ReactionSummary:
    """Return reaction counts by kind plus the viewer's own reaction."""
    get_visible_post(PostRepository(db), post_id, viewer_id)
    likes = list(db.scalars(select(Like).where(Like.post_id == post_id)))
    counts = count_reactions(likes)
    own = next((like.reaction_type for like in likes if like.user_id == viewer_id), None)
    return ReactionSummary(
        post_id=post_id,
        reactions_count=counts,
        total=counts.total,
        user_reaction=own,
    )


def _apply_reaction(
    db: Session,
    post_id: str,
    user_id: str,
    reaction_type: ReactionType | None,
) -> ReactionAction:
    existing = _find_reaction(db, post_id, user_id)

    if existing is None:
        kind = reaction_type or ReactionType.LIKE
        db.add(Like(post_id=post_id, user_id=user_id, reaction_type=kind.value))
        return "added"

    # Same kind again, or the bare "like" button on any existing reaction, toggles off.
    if reaction_type is None or existing.reaction_type == reaction_type.value:
        db.delete(existing)
        return "removed"

    existing.reaction_type = reaction_type.value
    return "updated"


def react_to_post(
    db: Session,
    post_id: str,
    user_id: str,
    reaction_type: ReactionType | None = None,
) -> ReactionResult:
    """Set, change or remove the caller's reaction on a post.

    Raises:
        NotFoundError: If the post does not exist or is hidden from the caller.
        StorageError: If the write fails.
    """
    get_visible_post(PostRepository(db), post_id, user_id)

    try:
        action = _apply_reaction(db, post_id, user_id, reaction_type)
        db.commit()
    except IntegrityError:
        # A concurrent request inserted first; re-read and toggle against its row once.
        db.rollback()
        try:
            action = _apply_reaction(db, post_id, user_id, reaction_type)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError("Failed to update reaction") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to update reaction") from exc

    logger.debug("Reaction on post %s by %s: %s", post_id, user_id, action)
    summary = reaction_summary(db, post_id, user_id)
    return ReactionResult(**summary.model_dump(), action=action)


def _get_comment_or_404(db: Session, comment_id: str) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


def _get_visible_comment(db: Session, comment_id: str, viewer_id: str | None) -> Comment:
    comment = _get_comment_or_404(db, comment_id)
    get_visible_post(PostRepository(db), comment.post_id, viewer_id)
    return comment


def comment_like_state(db: Session, comment_id: str, viewer_id: str | None) -> CommentLikeState:
    """Return the like count on a comment and whether the viewer liked it.

    Raises:
        NotFoundError: If the comment is missing or its post is hidden from the viewer.
    """
    _get_visible_comment(db, comment_id, viewer_id)
    count = db.scalar(
        select(func.count()).select_from(CommentLike).where(CommentLike.comment_id == comment_id)
    ) or 0
    is_liked = False
    if viewer_id:
        is_liked = db.scalars(
            select(CommentLike.id).where(
                CommentLike.comment_id == comment_id,
                CommentLike.user_id == viewer_id,
            )
        ).first() is not None
    return CommentLikeState(comment_id=comment_id, like_count=int(count), is_liked=is_liked)


def toggle_comment_like(db: Session, comment_id: str, user_id: str) -> CommentLikeState:
    """Like a comment, or unlike it if the caller already liked it.

    Raises:
        NotFoundError: If the comment is missing or its post is hidden from the caller.
        StorageError: If the write fails.
    """
    _get_visible_comment(db, comment_id, user_id)
    existing = db.scalars(
        select(CommentLike).where(
            CommentLike.comment_id == comment_id,
            CommentLike.user_id == user_id,
        )
    ).first()

    try:
        if existing is not None:
            db.delete(existing)
        else:
            db.add(CommentLike(comment_id=comment_id, user_id=user_id))
        db.commit()
    except IntegrityError:
        # Lost a race against an identical like; the comment is liked either way.
        db.rollback()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to update comment like") from exc

    return comment_like_state(db, comment_id, user_id)
