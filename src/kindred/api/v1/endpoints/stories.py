"""Ephemeral stories."""

from fastapi import APIRouter, Response, status

from kindred.api.v1.dependencies import CurrentUserIdDep, SessionDep
from kindred.schemas.common import ErrorResponse
from kindred.schemas.story import StoryCreate, StoryResponse, StoryWithAuthor
from kindred.services import stories

router = APIRouter(prefix="/stories", tags=["stories"])


@router.get("/", response_model=list[StoryWithAuthor])
async def list_stories(db: SessionDep) -> list[StoryWithAuthor]:
    """Unexpired stories, newest first."""
    return stories.list_active_stories(db)


@router.post(
    "/",
    response_model=StoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def create_story(story_data: StoryCreate, db: SessionDep, user_id: CurrentUserIdDep) -> StoryResponse:
    return stories.create_story(db, user_id, story_data)


@router.delete(
    "/{story_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_story(story_id: str, db: SessionDep, user_id: CurrentUserIdDep) -> Response:
    stories.delete_story(db, story_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
