"""Follow graph and profile reads/updates."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Set

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from kindred.core.errors import InvalidInputError, NotFoundError, StorageError
from kindred.models import Follow, Post, PostStatus, Profile
from kindred.schemas.user import (
    FollowEntry,
    FollowState,
    ProfileDetail,
    ProfileResponse,
    ProfileStats,
    ProfileUpdate,
)

logger = logging.getLogger(__name__)


def _get_profile_or_404(db: Session, user_id: str) -> Profile:
    profile = db.get(Profile, user_id)
    if profile is None:
        raise NotFoundError("User not found")
    return profile


def _find_edge(db: Session, follower_id: str, following_id: str) -> Follow | None:
    return db.scalars(
        select(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    ).first()


def following_ids(db: Session, user_id: str) -> set[str]:
    """Return the ids of everyone ``user_id`` follows."""
    return set(db.scalars(select(Follow.following_id).where(Follow.follower_id == user_id)))


def _count(db: Session, column, user_id: str) -> int:
    return int(db.scalar(select(func.count()).select_from(Follow).where(column == user_id)) or 0)


def profile_stats(db: Session, user_id: str) -> ProfileStats:
    """Count a user's non-rejected posts, followers and followees."""
    posts_count = db.scalar(
        select(func.count())
        .select_from(Post)
        .where(Post.author_id == user_id, Post.status != PostStatus.REJECTED.value)
    ) or 0
    return ProfileStats(
        posts_count=int(posts_count),
        followers_count=_count(db, Follow.following_id, user_id),
        following_count=_count(db, Follow.follower_id, user_id),
    )


def get_profile_detail(db: Session, user_id: str, viewer_following: Set[str]) -> ProfileDetail:
    """Return a profile with its stats and whether the viewer follows it.

    Raises:
        NotFoundError: If no profile exists for ``user_id``.
    """
    profile = _get_profile_or_404(db, user_id)
    return ProfileDetail(
        **ProfileResponse.model_validate(profile).model_dump(),
        stats=profile_stats(db, user_id),
        is_following=user_id in viewer_following,
    )


def update_profile(db: Session, user_id: str, data: ProfileUpdate) -> ProfileResponse:
    """Apply a partial update to the caller's own profile.

    Raises:
        NotFoundError: If the caller has no profile yet.
        StorageError: If the write fails.
    """
    profile = _get_profile_or_404(db, user_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to update profile") from exc
    db.refresh(profile)
    return ProfileResponse.model_validate(profile)


def follow_user(db: Session, follower_id: str, following_id: str) -> FollowState:
    """Follow a user. Following someone already followed is a no-op.

    Raises:
        InvalidInputError: If a user tries to follow themselves.
        NotFoundError: If the target has no profile.
    """
    if follower_id == following_id:
        raise InvalidInputError("You cannot follow yourself")
    _get_profile_or_404(db, following_id)

    if _find_edge(db, follower_id, following_id) is None:
        db.add(Follow(follower_id=follower_id, following_id=following_id))
        try:
            db.commit()
        except IntegrityError:
            # The same edge was written concurrently.
            db.rollback()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError("Failed to follow user") from exc
        else:
            logger.debug("%s now follows %s", follower_id, following_id)

    return FollowState(
        user_id=following_id,
        is_following=True,
        followers_count=_count(db, Follow.following_id, following_id),
    )


def unfollow_user(db: Session, follower_id: str, following_id: str) -> FollowState:
    """Stop following a user. Unfollowing someone not followed is a no-op."""
    edge = _find_edge(db, follower_id, following_id)
    if edge is not None:
        db.delete(edge)
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError("Failed to unfollow user") from exc

    return FollowState(
        user_id=following_id,
        is_following=False,
        followers_count=_count(db, Follow.following_id, following_id),
    )


def _entries(db: Session, user_ids: Iterable[str], viewer_following: Set[str]) -> list[FollowEntry]:
    ordered = list(user_ids)
    if not ordered:
        return []
    profiles = {p.id: p for p in db.scalars(select(Profile).where(Profile.id.in_(ordered)))}
    return [
        FollowEntry(
            id=user_id,
            full_name=profiles[user_id].full_name if user_id in profiles else None,
            avatar_url=profiles[user_id].avatar_url if user_id in profiles else None,
            is_following=user_id in viewer_following,
        )
        for user_id in ordered
    ]


def list_followers(db: Session, user_id: str, viewer_following: Set[str]) -> list[FollowEntry]:
    """Return the users following ``user_id``, most recent first."""
    _get_profile_or_404(db, user_id)
    ids = db.scalars(
        select(Follow.follower_id)
        .where(Follow.following_id == user_id)
        .order_by(Follow.created_at.desc())
    )
    return _entries(db, ids, viewer_following)


def list_following(db: Session, user_id: str, viewer_following: Set[str]) -> list[FollowEntry]:
    """Return the users ``user_id`` follows, most recent first."""
    _get_profile_or_404(db, user_id)
    ids = db.scalars(
        select(Follow.following_id)
        .where(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc())
    )
    return _entries(db, ids, viewer_following)
