"""Domain errors raised by Kindred services.

Every error carries the HTTP status code it maps to so the API layer can
render it uniformly as ``{"error": message}``.
"""

from fastapi import status


class KindredError(RuntimeError):
    """Base exception for all domain failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An internal server error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(KindredError):
    """Raised when a request is well-formed but semantically empty or invalid."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class UnauthorizedError(KindredError):
    """Raised when no valid caller identity is present."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(KindredError):
    """Raised when the caller does not own the row they are trying to change."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(KindredError):
    """Raised when a referenced post, comment, story or profile does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ModerationUnavailableError(KindredError):
    """Raised when the moderation classifier fails or answers with malformed data.

    Submissions never fall back to approving or parking content when this is
    raised; the caller has to resubmit.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Content moderation is currently unavailable"


class StorageError(KindredError):
    """Raised when a persistence write fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to persist changes"
