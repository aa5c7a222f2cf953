# src/kindred/services/moderation.py
"""AI-assisted content moderation.

This module provides:

- ``ModerationClassifier``: adapter around a generative model that classifies
  post text as toxic, spam, and/or profane and returns a strict ``Verdict``
- ``decide_status``: the pure mapping from a verdict to a publication status
- ``rejection_reasons``: human-readable reasons for a stored verdict

The classifier performs no retries. Any network failure, timeout, non-2xx
status, or response that does not match the verdict schema surfaces as
``ModerationUnavailableError``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from kindred.core.errors import ModerationUnavailableError
from kindred.core.settings import settings
from kindred.models.post import PostStatus
from kindred.schemas.moderation import Verdict

# Configure logger for this module
logger = logging.getLogger(__name__)

HTTP_OK = 200

# Structured-output schema handed to the model; mirrors ``Verdict``.
VERDICT_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "isToxic": {
            "type": "BOOLEAN",
            "description": "Is the content toxic, hateful, or violent?",
        },
        "isSpam": {
            "type": "BOOLEAN",
            "description": "Is the content spam or promotional?",
        },
        "isProfane": {
            "type": "BOOLEAN",
            "description": "Does the content contain profanity or swear words?",
        },
    },
    "required": ["isToxic", "isSpam", "isProfane"],
}

_REASONS: tuple[tuple[str, str], ...] = (
    ("isToxic", "Toxicity or hate speech"),
    ("isSpam", "Spam or promotional content"),
    ("isProfane", "Profanity or inappropriate language"),
)


def build_moderation_prompt(content: str, title: str | None = None) -> str:
    """Compose the single evaluation prompt for a submission."""
    if title:
        full_content = f'Title: "{title}"\n\nContent: "{content}"'
    else:
        full_content = f'Content: "{content}"'

    return (
        "You are a content moderator. Please analyze the following text and determine "
        "if it is toxic, spam, or contains profanity.\n\n"
        f"{full_content}\n\n"
        "Please be strict and flag any content that could be harmful, offensive, or "
        "inappropriate. Check both the title and content thoroughly."
    )


def decide_status(verdict: Verdict) -> PostStatus:
    """Return ``REJECTED`` if any flag is set, ``APPROVED`` otherwise."""
    return PostStatus.REJECTED if verdict.flagged else PostStatus.APPROVED


def rejection_reasons(moderation_result: Mapping[str, Any] | None) -> list[str]:
    """Translate a stored verdict into the reasons shown to the post's author."""
    if not moderation_result:
        return []
    return [reason for key, reason in _REASONS if moderation_result.get(key)]


@dataclass(frozen=True)
class ModerationConfig:
    """Immutable configuration for the moderation model."""

    base_url: str
    api_key: str | None
    endpoint: str
    timeout_seconds: float


def load_moderation_config() -> ModerationConfig:
    """Build configuration object from global settings."""
    return ModerationConfig(
        base_url=settings.moderation_api_base_url,
        api_key=settings.moderation_api_key,
        endpoint=settings.moderation_endpoint,
        timeout_seconds=float(settings.moderation_timeout_seconds),
    )


class ModerationClassifier:
    """HTTP adapter that asks a generative model for a moderation verdict."""

    def __init__(
        self,
        config: ModerationConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_moderation_config()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    def _build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": 0,
                "responseMimeType": "application/json",
                "responseSchema": VERDICT_RESPONSE_SCHEMA,
            },
        }

    async def classify(self, content: str, title: str | None = None) -> Verdict:
        """Classify a prospective post.

        Args:
            content: Post body text.
            title: Optional post title, moderated together with the body.

        Returns:
            The validated verdict.

        Raises:
            ModerationUnavailableError: If the model cannot be reached in time or
                answers with anything but a complete verdict.
        """
        if not self.config.api_key:
            raise ModerationUnavailableError("Moderation model is not configured")

        payload = self._build_payload(build_moderation_prompt(content, title))
        try:
            response = await asyncio.wait_for(
                self._post(payload),
                timeout=self.config.timeout_seconds,
            )
        except TimeoutError as exc:
            logger.warning(
                "Moderation request timed out after %.1fs", self.config.timeout_seconds
            )
            raise ModerationUnavailableError("Content moderation timed out") from exc

        return self._parse_verdict(response)

    async def _post(self, payload: Mapping[str, Any]) -> httpx.Response:
        client = await self._ensure_client()
        try:
            response = await client.post(
                self.config.endpoint,
                json=payload,
                headers={"x-goog-api-key": self.config.api_key or ""},
            )
        except httpx.HTTPError as exc:
            logger.warning("Moderation request failed: %s", exc)
            raise ModerationUnavailableError(
                f"Content moderation request failed: {exc}"
            ) from exc

        if response.status_code != HTTP_OK:
            logger.warning("Moderation model responded with %s", response.status_code)
            raise ModerationUnavailableError(
                f"Content moderation service responded with {response.status_code}"
            )
        return response

    @staticmethod
    def _parse_verdict(response: httpx.Response) -> Verdict:
        try:
            body = response.json()
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("Moderation response had no candidate text")
            raise ModerationUnavailableError("Malformed moderation response") from exc

        if not isinstance(text, str):
            raise ModerationUnavailableError("Malformed moderation response")

        try:
            return Verdict.model_validate_json(text)
        except ValidationError as exc:
            logger.warning("Moderation verdict failed validation: %s", exc.errors())
            raise ModerationUnavailableError("Malformed moderation verdict") from exc

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _ModerationClassifierSingleton:
    """Singleton wrapper for ModerationClassifier."""

    _instance: ModerationClassifier | None = None

    @classmethod
    def get_instance(cls) -> ModerationClassifier:
        """Get or create the singleton ModerationClassifier instance."""
        if cls._instance is None:
            cls._instance = ModerationClassifier()
        return cls._instance


def get_moderation_classifier() -> ModerationClassifier:
    """Return a singleton moderation classifier instance."""
    return _ModerationClassifierSingleton.get_instance()
