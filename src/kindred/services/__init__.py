"""Business logic services for the Kindred application."""

from .events import ChangeEvent, ChangeFeed
from .moderation import ModerationClassifier
from .post_service import PostSubmissionController
from .viewer import ViewerContext
from .visibility import AudienceContext, VisibilityPolicy

__all__ = [
    "AudienceContext",
    "ChangeEvent",
    "ChangeFeed",
    "ModerationClassifier",
    "PostSubmissionController",
    "ViewerContext",
    "VisibilityPolicy",
]
