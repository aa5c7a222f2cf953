"""Threaded comments on posts.

Threads are two levels deep at most: top-level comments and one tier of
replies. A reply to a reply is refused rather than flattened.
"""
from __future__ import annotations

import logging
from collections import Counter, defaultdict

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kindred.core.errors import ForbiddenError, InvalidInputError, NotFoundError, StorageError
from kindred.db.time import utcnow
from kindred.models import Comment, CommentLike
from kindred.repositories.post_repo import PostRepository
from kindred.schemas.comment import CommentCreate, CommentResponse, CommentThread
from kindred.services.feed import author_summaries, get_visible_post

logger = logging.getLogger(__name__)


def _clean_content(content: str) -> str:
    text = content.strip()
    if not text:
        raise InvalidInputError("Comment content is required")
    return text


def _get_comment_or_404(db: Session, comment_id: str) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


def _get_visible_comment(db: Session, comment_id: str, viewer_id: str) -> Comment:
    comment = _get_comment_or_404(db, comment_id)
    get_visible_post(PostRepository(db), comment.post_id, viewer_id)
    return comment


def _like_counts(db: Session, comment_ids: list[str]) -> Counter[str]:
    if not comment_ids:
        return Counter()
    rows = db.execute(
        select(CommentLike.comment_id, func.count())
        .where(CommentLike.comment_id.in_(comment_ids))
        .group_by(CommentLike.comment_id)
    )
    return Counter({comment_id: int(count) for comment_id, count in rows})


def _to_threads(db: Session, top_level: list[Comment], replies: list[Comment]) -> list[CommentThread]:
    everything = top_level + replies
    authors = author_summaries(db, (comment.author_id for comment in everything))
    likes = _like_counts(db, [comment.id for comment in everything])

    def _thread(comment: Comment) -> CommentThread:
        return CommentThread(
            **CommentResponse.model_validate(comment).model_dump(),
            author=authors[comment.author_id],
            like_count=likes[comment.id],
        )

    replies_by_parent: dict[str, list[CommentThread]] = defaultdict(list)
    for reply in replies:
        replies_by_parent[reply.parent_id or ""].append(_thread(reply))

    threads = []
    for comment in top_level:
        thread = _thread(comment)
        thread.replies = replies_by_parent[comment.id]
        thread.replies_count = len(thread.replies)
        threads.append(thread)
    return threads


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to %s comment: %s", action, exc)
        raise StorageError(f"Failed to {action} comment") from exc


def list_comments(db: Session, post_id: str, viewer_id: str | None) -> list[CommentThread]:
    """Return top-level comments oldest first, each with its replies oldest first."""
    get_visible_post(PostRepository(db), post_id, viewer_id)
    rows = list(
        db.scalars(
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at, Comment.id)
        )
    )
    top_level = [comment for comment in rows if comment.parent_id is None]
    replies = [comment for comment in rows if comment.parent_id is not None]
    return _to_threads(db, top_level, replies)


def create_comment(db: Session, user_id: str, data: CommentCreate) -> CommentThread:
    """Create a top-level comment or a one-level reply.

    Raises:
        InvalidInputError: If the content is empty, or the parent is itself a
            reply or belongs to another post.
        NotFoundError: If the post or parent comment does not exist.
    """
    content = _clean_content(data.content)
    get_visible_post(PostRepository(db), data.post_id, user_id)

    if data.parent_id is not None:
        parent = db.get(Comment, data.parent_id)
        if parent is None:
            raise NotFoundError("Parent comment not found")
        if parent.post_id != data.post_id:
            raise InvalidInputError("Parent comment belongs to a different post")
        if parent.parent_id is not None:
            raise InvalidInputError("Replies can only be one level deep")

    comment = Comment(
        post_id=data.post_id,
        author_id=user_id,
        parent_id=data.parent_id,
        content=content,
    )
    db.add(comment)
    _commit(db, "create")
    db.refresh(comment)
    return _to_threads(db, [comment], [])[0]


def update_comment(db: Session, comment_id: str, user_id: str, content: str) -> CommentThread:
    """Edit the caller's own comment.

    Raises:
        NotFoundError: If the comment or its post is missing or hidden from the caller.
        ForbiddenError: If the caller is not its author.
        InvalidInputError: If the new content is empty.
    """
    comment = _get_visible_comment(db, comment_id, user_id)
    if comment.author_id != user_id:
        raise ForbiddenError("You can only edit your own comments")

    comment.content = _clean_content(content)
    comment.updated_at = utcnow()
    _commit(db, "update")
    db.refresh(comment)

    replies = []
    if comment.parent_id is None:
        replies = list(
            db.scalars(
                select(Comment).where(Comment.parent_id == comment.id).order_by(Comment.created_at)
            )
        )
    return _to_threads(db, [comment], replies)[0]


def delete_comment(db: Session, comment_id: str, user_id: str) -> None:
    """Delete the caller's own comment and its direct replies.

    Raises:
        NotFoundError: If the comment or its post is missing or hidden from the caller.
        ForbiddenError: If the caller is not its author.
    """
    comment = _get_visible_comment(db, comment_id, user_id)
    if comment.author_id != user_id:
        raise ForbiddenError("You can only delete your own comments")

    reply_ids = select(Comment.id).where(Comment.parent_id == comment.id)
    db.execute(
        delete(CommentLike).where(
            or_(CommentLike.comment_id == comment.id, CommentLike.comment_id.in_(reply_ids))
        )
    )
    db.execute(delete(Comment).where(Comment.parent_id == comment.id))
    db.delete(comment)
    _commit(db, "delete")
    logger.debug("Comment %s deleted with its replies", comment_id)
