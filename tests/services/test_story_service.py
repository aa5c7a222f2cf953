# tests/services/test_story_service.py
"""Tests for story creation, expiry and cleanup."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from kindred.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from kindred.db.time import as_utc
from kindred.models import MediaType, Profile, Story
from kindred.schemas.story import StoryCreate
from kindred.services.stories import (
    cleanup_expired_stories,
    create_story,
    delete_story,
    list_active_stories,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _story_count(db_session: Session) -> int:
    return db_session.scalar(select(func.count()).select_from(Story))


def test_create_story_defaults_and_expiry(db_session: Session, alice: Profile) -> None:
    story = create_story(db_session, alice.id, StoryCreate(content="Sunset"), now=NOW)

    assert story.background_color == "white"
    assert story.text_color == "black"
    assert as_utc(story.expires_at) == NOW + timedelta(hours=24)


def test_media_story(db_session: Session, alice: Profile) -> None:
    story = create_story(
        db_session,
        alice.id,
        StoryCreate(media_url="https://cdn.test/clip.mp4", media_type=MediaType.VIDEO),
    )
    assert story.content is None
    assert story.media_type == MediaType.VIDEO


@pytest.mark.parametrize(
    "data",
    [StoryCreate(), StoryCreate(content="   "), StoryCreate(media_url="https://cdn.test/a.png")],
    ids=["empty", "blank", "media-without-type"],
)
def test_invalid_stories(db_session: Session, alice: Profile, data: StoryCreate) -> None:
    with pytest.raises(InvalidInputError):
        create_story(db_session, alice.id, data)
    assert _story_count(db_session) == 0


def test_expired_stories_are_never_listed_even_before_cleanup(
    db_session: Session, alice: Profile, bob: Profile
) -> None:
    create_story(db_session, alice.id, StoryCreate(content="old"), now=NOW - timedelta(hours=30))
    create_story(db_session, alice.id, StoryCreate(content="morning"), now=NOW - timedelta(hours=5))
    create_story(db_session, bob.id, StoryCreate(content="just now"), now=NOW - timedelta(minutes=1))

    listed = list_active_stories(db_session, now=NOW)

    assert [story.content for story in listed] == ["just now", "morning"]
    assert listed[0].author.full_name == "Bob"
    assert _story_count(db_session) == 3


def test_cleanup_is_idempotent(db_session: Session, alice: Profile) -> None:
    create_story(db_session, alice.id, StoryCreate(content="old"), now=NOW - timedelta(hours=30))
    create_story(db_session, alice.id, StoryCreate(content="older"), now=NOW - timedelta(days=3))
    create_story(db_session, alice.id, StoryCreate(content="fresh"), now=NOW - timedelta(hours=1))

    assert cleanup_expired_stories(db_session, NOW) == 2
    assert cleanup_expired_stories(db_session, NOW) == 0
    assert [story.content for story in list_active_stories(db_session, now=NOW)] == ["fresh"]


def test_only_the_author_can_delete(db_session: Session, alice: Profile, bob: Profile) -> None:
    story = create_story(db_session, alice.id, StoryCreate(content="mine"))

    with pytest.raises(ForbiddenError):
        delete_story(db_session, story.id, bob.id)

    delete_story(db_session, story.id, alice.id)
    assert _story_count(db_session) == 0
    with pytest.raises(NotFoundError):
        delete_story(db_session, story.id, alice.id)
