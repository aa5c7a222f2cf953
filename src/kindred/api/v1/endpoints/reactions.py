"""Reactions on posts."""

from fastapi import APIRouter

from kindred.api.v1.dependencies import CurrentUserIdDep, OptionalViewerIdDep, SessionDep
from kindred.schemas.common import ErrorResponse
from kindred.schemas.reaction import ReactionRequest, ReactionResult, ReactionSummary
from kindred.services.reactions import react_to_post, reaction_summary

router = APIRouter(prefix="/posts", tags=["reactions"])


@router.get(
    "/{post_id}/reactions",
    response_model=ReactionSummary,
    responses={404: {"model": ErrorResponse}},
)
async def get_reactions(post_id: str, db: SessionDep, viewer_id: OptionalViewerIdDep) -> ReactionSummary:
    """Reaction counts by kind and the viewer's own reaction."""
    return reaction_summary(db, post_id, viewer_id)


@router.post(
    "/{post_id}/reactions",
    response_model=ReactionResult,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def react(
    post_id: str,
    db: SessionDep,
    user_id: CurrentUserIdDep,
    reaction: ReactionRequest | None = None,
) -> ReactionResult:
    """Add, change or remove the caller's reaction.

    Sending the reaction already held removes it; sending another kind
    replaces it. An empty body toggles a plain ``like``.
    """
    reaction_type = reaction.reaction_type if reaction else None
    return react_to_post(db, post_id, user_id, reaction_type)
