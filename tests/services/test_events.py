# tests/services/test_events.py
"""Tests for the change feed."""

from collections.abc import Iterator

import pytest
from sqlalchemy.orm import Session

from kindred.models import Profile, Story
from kindred.db.time import utcnow
from kindred.services.events import ChangeEvent, ChangeFeed


@pytest.fixture()
def change_feed(db_session: Session) -> Iterator[ChangeFeed]:
    feed = ChangeFeed()
    feed.attach(db_session)
    try:
        yield feed
    finally:
        feed.detach(db_session)


def _story(author: Profile, content: str) -> Story:
    now = utcnow()
    return Story(author_id=author.id, content=content, created_at=now, expires_at=now)


def test_events_are_delivered_after_commit(db_session: Session, change_feed: ChangeFeed, alice: Profile) -> None:
    received: list[ChangeEvent] = []
    change_feed.on_change("stories", None, received.append)

    story = _story(alice, "hello")
    db_session.add(story)
    db_session.flush()
    assert received == []

    db_session.commit()
    assert [(event.table, event.action) for event in received] == [("stories", "insert")]
    assert received[0].row["content"] == "hello"

    story.content = "edited"
    db_session.commit()
    db_session.delete(story)
    db_session.commit()
    assert [event.action for event in received] == ["insert", "update", "delete"]
    assert received[1].row["content"] == "edited"


def test_rollback_drops_pending_events(db_session: Session, change_feed: ChangeFeed, alice: Profile) -> None:
    received: list[ChangeEvent] = []
    change_feed.on_change("stories", None, received.append)

    db_session.add(_story(alice, "never"))
    db_session.flush()
    db_session.rollback()
    db_session.commit()

    assert received == []


def test_predicate_table_filter_and_unsubscribe(
    db_session: Session, change_feed: ChangeFeed, alice: Profile
) -> None:
    matching: list[ChangeEvent] = []
    profiles: list[ChangeEvent] = []
    unsubscribe = change_feed.on_change("stories", lambda event: event.row["content"] == "b", matching.append)
    change_feed.on_change("profiles", None, profiles.append)

    db_session.add_all([_story(alice, "a"), _story(alice, "b")])
    db_session.commit()
    assert [event.row["content"] for event in matching] == ["b"]
    assert profiles == []

    unsubscribe()
    unsubscribe()
    db_session.add(_story(alice, "b"))
    db_session.commit()
    assert len(matching) == 1


def test_failing_subscriber_does_not_break_others(
    db_session: Session, change_feed: ChangeFeed, alice: Profile
) -> None:
    received: list[ChangeEvent] = []

    def explode(event: ChangeEvent) -> None:
        raise RuntimeError("boom")

    change_feed.on_change("stories", None, explode)
    change_feed.on_change("stories", None, received.append)

    db_session.add(_story(alice, "ok"))
    db_session.commit()

    assert len(received) == 1
