"""Profiles, user timelines and the follow graph."""

from fastapi import APIRouter

from kindred.api.v1.dependencies import (
    CurrentUserIdDep,
    PostRepoDep,
    SessionDep,
    ViewerDep,
)
from kindred.core.errors import NotFoundError
from kindred.schemas.common import ErrorResponse
from kindred.schemas.post import FeedPost
from kindred.schemas.user import (
    FollowEntry,
    FollowState,
    ProfileDetail,
    ProfileResponse,
    ProfileUpdate,
)
from kindred.services import follows
from kindred.services.feed import user_posts

router = APIRouter(prefix="/users", tags=["users"])

_NOT_FOUND = {404: {"model": ErrorResponse}}


@router.get("/me", response_model=ProfileDetail, responses={401: {"model": ErrorResponse}, **_NOT_FOUND})
async def get_me(db: SessionDep, viewer: ViewerDep) -> ProfileDetail:
    """The caller's own profile with stats."""
    user_id = viewer.require_user_id()
    if viewer.profile is None:
        raise NotFoundError("User not found")
    return follows.get_profile_detail(db, user_id, viewer.following_ids)


@router.put("/me", response_model=ProfileResponse, responses={401: {"model": ErrorResponse}, **_NOT_FOUND})
async def update_me(
    profile_data: ProfileUpdate,
    db: SessionDep,
    user_id: CurrentUserIdDep,
    viewer: ViewerDep,
) -> ProfileResponse:
    """Update the caller's own profile; only fields sent are changed."""
    profile = follows.update_profile(db, user_id, profile_data)
    viewer.invalidate_profile()
    return profile


@router.get("/{user_id}", response_model=ProfileDetail, responses=_NOT_FOUND)
async def get_user(user_id: str, db: SessionDep, viewer: ViewerDep) -> ProfileDetail:
    return follows.get_profile_detail(db, user_id, viewer.following_ids)


@router.get("/{user_id}/posts", response_model=list[FeedPost])
async def get_user_posts(user_id: str, repo: PostRepoDep, viewer: ViewerDep) -> list[FeedPost]:
    """A user's approved posts, newest first."""
    return user_posts(repo, user_id, viewer.viewer_id)


@router.get("/{user_id}/followers", response_model=list[FollowEntry], responses=_NOT_FOUND)
async def get_followers(user_id: str, db: SessionDep, viewer: ViewerDep) -> list[FollowEntry]:
    return follows.list_followers(db, user_id, viewer.following_ids)


@router.get("/{user_id}/following", response_model=list[FollowEntry], responses=_NOT_FOUND)
async def get_following(user_id: str, db: SessionDep, viewer: ViewerDep) -> list[FollowEntry]:
    return follows.list_following(db, user_id, viewer.following_ids)


@router.post(
    "/{user_id}/follow",
    response_model=FollowState,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, **_NOT_FOUND},
)
async def follow(
    user_id: str,
    db: SessionDep,
    current_user_id: CurrentUserIdDep,
    viewer: ViewerDep,
) -> FollowState:
    """Follow a user. Repeating the request changes nothing."""
    state = follows.follow_user(db, current_user_id, user_id)
    viewer.invalidate_following()
    return state


@router.delete("/{user_id}/follow", response_model=FollowState, responses={401: {"model": ErrorResponse}})
async def unfollow(
    user_id: str,
    db: SessionDep,
    current_user_id: CurrentUserIdDep,
    viewer: ViewerDep,
) -> FollowState:
    """Stop following a user. Repeating the request changes nothing."""
    state = follows.unfollow_user(db, current_user_id, user_id)
    viewer.invalidate_following()
    return state
