"""Comments, replies and comment likes."""

from fastapi import APIRouter, Query, Response, status

from kindred.api.v1.dependencies import CurrentUserIdDep, OptionalViewerIdDep, SessionDep
from kindred.schemas.comment import CommentCreate, CommentLikeState, CommentThread, CommentUpdate
from kindred.schemas.common import ErrorResponse
from kindred.services import comments
from kindred.services.reactions import comment_like_state, toggle_comment_like

router = APIRouter(prefix="/comments", tags=["comments"])

_OWNER_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get("/", response_model=list[CommentThread], responses={404: {"model": ErrorResponse}})
async def list_comments(
    db: SessionDep,
    viewer_id: OptionalViewerIdDep,
    post_id: str = Query(..., description="Post whose comments to list"),
) -> list[CommentThread]:
    """Top-level comments oldest first, each with its replies."""
    return comments.list_comments(db, post_id, viewer_id)


@router.post(
    "/",
    response_model=CommentThread,
    status_code=status.HTTP_201_CREATED,
    responses=_OWNER_ERRORS,
)
async def create_comment(
    comment_data: CommentCreate,
    db: SessionDep,
    user_id: CurrentUserIdDep,
) -> CommentThread:
    """Comment on a post, or reply to a top-level comment with ``parent_id``."""
    return comments.create_comment(db, user_id, comment_data)


@router.put("/{comment_id}", response_model=CommentThread, responses=_OWNER_ERRORS)
async def update_comment(
    comment_id: str,
    comment_data: CommentUpdate,
    db: SessionDep,
    user_id: CurrentUserIdDep,
) -> CommentThread:
    return comments.update_comment(db, comment_id, user_id, comment_data.content)


@router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_OWNER_ERRORS,
)
async def delete_comment(comment_id: str, db: SessionDep, user_id: CurrentUserIdDep) -> Response:
    """Delete the caller's comment together with its replies."""
    comments.delete_comment(db, comment_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{comment_id}/likes",
    response_model=CommentLikeState,
    responses={404: {"model": ErrorResponse}},
)
async def get_comment_likes(
    comment_id: str,
    db: SessionDep,
    viewer_id: OptionalViewerIdDep,
) -> CommentLikeState:
    return comment_like_state(db, comment_id, viewer_id)


@router.post(
    "/{comment_id}/likes",
    response_model=CommentLikeState,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def like_comment(comment_id: str, db: SessionDep, user_id: CurrentUserIdDep) -> CommentLikeState:
    """Toggle the caller's like on a comment."""
    return toggle_comment_like(db, comment_id, user_id)
