"""Post submission, feeds and rankings."""

from fastapi import APIRouter, Query, Response, status

from kindred.api.v1.dependencies import (
    ClassifierDep,
    CurrentUserIdDep,
    OptionalViewerIdDep,
    PostRepoDep,
)
from kindred.models import Post
from kindred.schemas.common import ErrorResponse
from kindred.schemas.post import (
    FeedPost,
    PostCreate,
    PostResponse,
    RankedPost,
    RejectedPost,
    TrendingWindow,
)
from kindred.services import feed, rankings
from kindred.services.post_service import PostSubmission, PostSubmissionController, delete_post

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post(
    "/",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def create_post(
    post_data: PostCreate,
    user_id: CurrentUserIdDep,
    repo: PostRepoDep,
    classifier: ClassifierDep,
) -> Post:
    """Submit a post; it is classified before it is stored.

    The response carries the decided status. A rejected post is stored and
    visible only on its author's rejected view. If the classifier cannot be
    reached nothing is stored and the request fails with 500.
    """
    controller = PostSubmissionController(repo, classifier)
    return await controller.submit(user_id, PostSubmission.from_schema(post_data))


@router.get("/feed", response_model=list[FeedPost])
async def get_feed(repo: PostRepoDep, viewer_id: OptionalViewerIdDep) -> list[FeedPost]:
    """Every approved post, newest first."""
    return feed.build_feed(repo, viewer_id)


@router.get("/popular", response_model=list[RankedPost])
async def get_popular(
    repo: PostRepoDep,
    viewer_id: OptionalViewerIdDep,
    limit: int | None = Query(None, ge=1, le=50),
) -> list[RankedPost]:
    """Approved posts ranked by total reactions."""
    return rankings.popular_posts(repo, viewer_id, limit=limit)


@router.get("/trending", response_model=list[RankedPost])
async def get_trending(
    repo: PostRepoDep,
    viewer_id: OptionalViewerIdDep,
    window: TrendingWindow = Query("week", description="today, week or month"),
    limit: int | None = Query(None, ge=1, le=50),
) -> list[RankedPost]:
    """Recent approved posts ranked by reactions plus weighted comments."""
    return rankings.trending_posts(repo, viewer_id, window=window, limit=limit)


@router.get("/mine", response_model=list[FeedPost])
async def get_my_posts(repo: PostRepoDep, user_id: CurrentUserIdDep) -> list[FeedPost]:
    """The caller's own posts, excluding rejected ones."""
    return feed.own_posts(repo, user_id)


@router.get("/mine/rejected", response_model=list[RejectedPost])
async def get_my_rejected_posts(repo: PostRepoDep, user_id: CurrentUserIdDep) -> list[RejectedPost]:
    """The caller's rejected posts with the reasons they were flagged."""
    return feed.own_rejected_posts(repo, user_id)


@router.get("/{post_id}", response_model=FeedPost, responses={404: {"model": ErrorResponse}})
async def get_post(post_id: str, repo: PostRepoDep, viewer_id: OptionalViewerIdDep) -> FeedPost:
    return feed.post_detail(repo, post_id, viewer_id)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def remove_post(post_id: str, repo: PostRepoDep, user_id: CurrentUserIdDep) -> Response:
    """Delete the caller's own post with its comments and reactions."""
    delete_post(repo, post_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
