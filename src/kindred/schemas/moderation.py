# src/kindred/schemas/moderation.py
"""Moderation verdict schema shared by the classifier and the submission controller."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Verdict(BaseModel):
    """Three-boolean classification of a submission.

    Validation is strict: every field must be present, must be a JSON
    boolean, and no other keys are accepted.
    """

    model_config = ConfigDict(extra="forbid", strict=True, populate_by_name=True, frozen=True)

    is_toxic: bool = Field(..., alias="isToxic", description="Toxic, hateful, or violent")
    is_spam: bool = Field(..., alias="isSpam", description="Spam or promotional")
    is_profane: bool = Field(..., alias="isProfane", description="Profanity or swear words")

    @property
    def flagged(self) -> bool:
        """Return True if any of the three flags is set."""
        return self.is_toxic or self.is_spam or self.is_profane

    def to_record(self) -> dict[str, Any]:
        """Return the dict stored in ``Post.moderation_result``."""
        return {
            "isToxic": self.is_toxic,
            "isSpam": self.is_spam,
            "isProfane": self.is_profane,
            "flagged": self.flagged,
        }
