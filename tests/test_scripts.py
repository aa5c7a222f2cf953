# tests/test_scripts.py
"""Tests for the command-line entry points."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from kindred.core.security import decode_access_token
from kindred.db.time import utcnow
from kindred.models import Profile, Story
from kindred.scripts import cleanup_stories, tokens


def test_cleanup_stories_removes_expired(
    db_session: Session, alice: Profile, mocker, capsys: pytest.CaptureFixture[str]
) -> None:
    now = utcnow()
    db_session.add_all(
        [
            Story(author_id=alice.id, content="old", created_at=now - timedelta(days=2), expires_at=now - timedelta(days=1)),
            Story(author_id=alice.id, content="new", created_at=now, expires_at=now + timedelta(hours=24)),
        ]
    )
    db_session.commit()
    mocker.patch.object(cleanup_stories, "SessionLocal", return_value=db_session)

    assert cleanup_stories.main([]) == 0

    assert "removed 1 expired stories" in capsys.readouterr().out
    assert db_session.scalar(select(func.count()).select_from(Story)) == 1


def test_cleanup_stories_accepts_a_reference_time(
    db_session: Session, alice: Profile, mocker, capsys: pytest.CaptureFixture[str]
) -> None:
    now = utcnow()
    db_session.add(Story(author_id=alice.id, content="new", created_at=now, expires_at=now + timedelta(hours=24)))
    db_session.commit()
    mocker.patch.object(cleanup_stories, "SessionLocal", return_value=db_session)

    later = (now + timedelta(days=2)).isoformat()
    assert cleanup_stories.main(["--now", later]) == 0

    assert "removed 1 expired stories" in capsys.readouterr().out


def test_token_cli_prints_a_valid_token(capsys: pytest.CaptureFixture[str]) -> None:
    assert tokens.main(["user-123"]) == 0
    token = capsys.readouterr().out.strip()
    assert decode_access_token(token) == "user-123"

    tokens.main(["user-123", "--header"])
    assert capsys.readouterr().out.startswith("Authorization: Bearer ")
