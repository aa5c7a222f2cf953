"""Post submission and deletion.

A submission resolves within one request and moves through
``RECEIVED -> VALIDATED -> CLASSIFIED -> PERSISTED``. Any failure is terminal
for that request and leaves no row behind: there is no pending or
unclassified fallback when the classifier is unavailable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from kindred.core.errors import (
    ForbiddenError,
    InvalidInputError,
    ModerationUnavailableError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
)
from kindred.core.settings import settings
from kindred.models import MediaType, Post, PostStatus
from kindred.repositories.post_repo import PostRepository
from kindred.schemas.moderation import Verdict
from kindred.schemas.post import PostCreate
from kindred.services.moderation import decide_status

logger = logging.getLogger(__name__)


class VerdictClassifier(Protocol):
    """Anything that can turn post text into a moderation verdict."""

    async def classify(self, content: str, title: str | None = None) -> Verdict: ...


class SubmissionStage(str, Enum):
    """Progress of a single submission."""

    RECEIVED = "received"
    VALIDATED = "validated"
    CLASSIFIED = "classified"
    PERSISTED = "persisted"


@dataclass(frozen=True)
class PostSubmission:
    """Raw submission as received from the client."""

    content: str = ""
    title: str | None = None
    media_url: str | None = None
    media_type: MediaType | None = None
    feeling: str | None = None
    background_color: str | None = None
    text_color: str | None = None

    @classmethod
    def from_schema(cls, data: PostCreate) -> PostSubmission:
        return cls(
            content=data.content,
            title=data.title,
            media_url=data.media_url,
            media_type=data.media_type,
            feeling=data.feeling,
            background_color=data.background_color,
            text_color=data.text_color,
        )


class PostSubmissionController:
    """Turn a raw submission into a persisted, correctly statused post."""

    def __init__(self, repo: PostRepository, classifier: VerdictClassifier) -> None:
        self.repo = repo
        self.classifier = classifier

    async def submit(self, author_id: str | None, submission: PostSubmission) -> Post:
        """Validate, classify, decide and persist a submission.

        Args:
            author_id: Identity of the caller, or None when unauthenticated.
            submission: The submitted post fields.

        Returns:
            The stored post, including its id, status, verdict and creation time.

        Raises:
            UnauthorizedError: If there is no caller identity.
            InvalidInputError: If neither body text nor media is present.
            ModerationUnavailableError: If the classifier fails.
            StorageError: If the write fails.
        """
        stage = SubmissionStage.RECEIVED
        self._validate(author_id, submission)
        stage = self._advance(stage, SubmissionStage.VALIDATED)

        verdict = await self._classify(submission)
        stage = self._advance(stage, SubmissionStage.CLASSIFIED)

        status = decide_status(verdict)
        logger.info(
            "Post by %s classified as %s (toxic=%s spam=%s profane=%s)",
            author_id,
            status.value,
            verdict.is_toxic,
            verdict.is_spam,
            verdict.is_profane,
        )

        post = self._persist(author_id, submission, verdict, status)
        self._advance(stage, SubmissionStage.PERSISTED)
        return post

    @staticmethod
    def _advance(current: SubmissionStage, target: SubmissionStage) -> SubmissionStage:
        logger.debug("Submission %s -> %s", current.value, target.value)
        return target

    @staticmethod
    def _validate(author_id: str | None, submission: PostSubmission) -> None:
        if not author_id:
            raise UnauthorizedError()
        if not submission.content.strip() and not submission.media_url:
            raise InvalidInputError("Post content or media is required")
        if submission.media_url and submission.media_type is None:
            raise InvalidInputError("media_type is required when media_url is set")

    async def _classify(self, submission: PostSubmission) -> Verdict:
        try:
            return await self.classifier.classify(submission.content, submission.title or None)
        except ModerationUnavailableError:
            logger.warning("Submission failed: moderation unavailable")
            raise

    def _persist(
        self,
        author_id: str,
        submission: PostSubmission,
        verdict: Verdict,
        status: PostStatus,
    ) -> Post:
        session = self.repo.session
        try:
            post = self.repo.create(
                author_id=author_id,
                content=submission.content,
                title=submission.title or None,
                media_url=submission.media_url,
                media_type=submission.media_type.value if submission.media_type else None,
                feeling=submission.feeling,
                background_color=submission.background_color or settings.default_background_color,
                text_color=submission.text_color or settings.default_text_color,
                status=status.value,
                moderation_result=verdict.to_record(),
            )
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("Failed to persist post for %s: %s", author_id, exc)
            raise StorageError("Failed to create post") from exc

        session.refresh(post)
        return post


def delete_post(repo: PostRepository, post_id: str, user_id: str) -> None:
    """Delete a post owned by ``user_id`` together with its dependents.

    Raises:
        NotFoundError: If the post does not exist.
        ForbiddenError: If the caller is not the author.
        StorageError: If the delete fails.
    """
    post = repo.get_by_id(post_id)
    if post is None:
        raise NotFoundError("Post not found")
    if post.author_id != user_id:
        raise ForbiddenError("You can only delete your own posts")

    try:
        repo.delete_with_dependents(post)
        repo.session.commit()
    except SQLAlchemyError as exc:
        repo.session.rollback()
        raise StorageError("Failed to delete post") from exc
    logger.info("Post %s deleted by its author", post_id)
