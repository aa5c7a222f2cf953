"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from kindred.core.errors import UnauthorizedError
from kindred.core.security import decode_access_token
from kindred.db.session import get_db
from kindred.repositories.post_repo import PostRepository
from kindred.services.moderation import ModerationClassifier, get_moderation_classifier
from kindred.services.viewer import ViewerContext

# Missing credentials are reported by our own handler, not HTTPBearer's 403.
bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_optional_viewer_id(credentials: CredentialsDep) -> str | None:
    """Return the caller's user id, or None when no token was sent.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)


def get_current_user_id(credentials: CredentialsDep) -> str:
    """Return the authenticated caller's user id.

    Raises:
        UnauthorizedError: If the token is missing, malformed or expired.
    """
    if credentials is None:
        raise UnauthorizedError()
    return decode_access_token(credentials.credentials)


OptionalViewerIdDep = Annotated[str | None, Depends(get_optional_viewer_id)]
CurrentUserIdDep = Annotated[str, Depends(get_current_user_id)]


def get_viewer_context(db: SessionDep, viewer_id: OptionalViewerIdDep) -> ViewerContext:
    """Build the per-request viewer context."""
    return ViewerContext(db, viewer_id)


def get_post_repository(db: SessionDep) -> PostRepository:
    return PostRepository(db)


def get_classifier_dep() -> ModerationClassifier:
    """Return the shared moderation classifier."""
    return get_moderation_classifier()


ViewerDep = Annotated[ViewerContext, Depends(get_viewer_context)]
PostRepoDep = Annotated[PostRepository, Depends(get_post_repository)]
ClassifierDep = Annotated[ModerationClassifier, Depends(get_classifier_dep)]
