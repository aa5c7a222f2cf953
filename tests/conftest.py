# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MODERATION_API_KEY", "test-key")

from kindred.api.v1.dependencies import get_classifier_dep
from kindred.core.errors import ModerationUnavailableError
from kindred.core.security import create_access_token
from kindred.db.session import Base
from kindred.db.session import get_db as app_get_session
from kindred.db.time import utcnow
from kindred.main import app as fastapi_app
from kindred.models import Post, PostStatus, Profile
from kindred.schemas.moderation import Verdict

TEST_DB_URL = "sqlite://"

CLEAN = Verdict(is_toxic=False, is_spam=False, is_profane=False)


class FakeClassifier:
    """Stand-in for the moderation model.

    ``verdicts`` maps a substring of the post body to the verdict returned for
    it; anything else is clean. Setting ``error`` makes every call fail.
    """

    def __init__(self) -> None:
        self.verdicts: dict[str, Verdict] = {}
        self.error: ModerationUnavailableError | None = None
        self.calls: list[tuple[str, str | None]] = []

    async def classify(self, content: str, title: str | None = None) -> Verdict:
        self.calls.append((content, title))
        if self.error is not None:
            raise self.error
        for needle, verdict in self.verdicts.items():
            if needle in content:
                return verdict
        return CLEAN


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so every test starts from empty tables instead.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def fake_classifier(app: FastAPI) -> Iterator[FakeClassifier]:
    """Override the moderation classifier dependency with a scripted fake."""
    classifier = FakeClassifier()
    app.dependency_overrides[get_classifier_dep] = lambda: classifier
    try:
        yield classifier
    finally:
        app.dependency_overrides.pop(get_classifier_dep, None)


@pytest.fixture()
def client(app: FastAPI, fake_classifier: FakeClassifier) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _make_profile(db_session: Session, full_name: str) -> Profile:
    profile = Profile(id=str(uuid4()), full_name=full_name, email=f"{full_name.lower()}@example.com")
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture()
def alice(db_session: Session) -> Profile:
    """Primary test user."""
    return _make_profile(db_session, "Alice")


@pytest.fixture()
def bob(db_session: Session) -> Profile:
    """Secondary test user."""
    return _make_profile(db_session, "Bob")


@pytest.fixture()
def carol(db_session: Session) -> Profile:
    return _make_profile(db_session, "Carol")


def _bearer(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture()
def auth_headers() -> Callable[[Profile], dict[str, str]]:
    """Return a builder of authorization headers for any profile."""
    return lambda profile: _bearer(profile.id)


@pytest.fixture()
def alice_headers(alice: Profile) -> dict[str, str]:
    return _bearer(alice.id)


@pytest.fixture()
def bob_headers(bob: Profile) -> dict[str, str]:
    return _bearer(bob.id)


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Insert a post directly, bypassing the classifier.

    ``age`` pushes ``created_at`` into the past so ordering is deterministic.
    """

    def _make(
        author: Profile,
        content: str = "Hello there",
        *,
        status: PostStatus = PostStatus.APPROVED,
        age: timedelta = timedelta(0),
        now: datetime | None = None,
        **fields: Any,
    ) -> Post:
        flagged = status is PostStatus.REJECTED
        post = Post(
            author_id=author.id,
            content=content,
            status=status.value,
            moderation_result={
                "isToxic": False,
                "isSpam": flagged,
                "isProfane": False,
                "flagged": flagged,
            },
            created_at=(now or utcnow()) - age,
            **fields,
        )
        db_session.add(post)
        db_session.commit()
        return post

    return _make
