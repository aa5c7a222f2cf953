"""Row-level change notifications for ORM writes.

Services never publish events themselves. A ``ChangeFeed`` attached to a
session or sessionmaker collects the rows each flush inserts, updates or
deletes, holds them until the transaction ends, and delivers them to
subscribers only once the commit succeeds. A rollback discards them.

Bulk statements issued through ``session.execute(delete(...))`` bypass the
unit of work and therefore produce no events.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Literal

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

ChangeAction = Literal["insert", "update", "delete"]
ChangePredicate = Callable[["ChangeEvent"], bool]
ChangeCallback = Callable[["ChangeEvent"], None]

_PENDING_KEY = "kindred.pending_changes"


@dataclass(frozen=True)
class ChangeEvent:
    """A committed change to one row."""

    table: str
    action: ChangeAction
    row: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class _Subscription:
    table: str
    predicate: ChangePredicate | None
    callback: ChangeCallback


def _snapshot(instance: Any) -> dict[str, Any]:
    mapper = inspect(instance).mapper
    return {attr.key: getattr(instance, attr.key) for attr in mapper.column_attrs}


class ChangeFeed:
    """In-process publish/subscribe over committed ORM changes."""

    def __init__(self) -> None:
        self._subscriptions: dict[int, _Subscription] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def on_change(
        self,
        table: str,
        predicate: ChangePredicate | None,
        callback: ChangeCallback,
    ) -> Callable[[], None]:
        """Subscribe ``callback`` to committed changes on ``table``.

        Args:
            table: Table name, e.g. ``"posts"``.
            predicate: Optional filter; events for which it returns False are skipped.
            callback: Called once per matching event, after commit.

        Returns:
            A callable that removes the subscription. Calling it twice is harmless.
        """
        with self._lock:
            subscription_id = next(self._ids)
            self._subscriptions[subscription_id] = _Subscription(table, predicate, callback)

        def unsubscribe() -> None:
            with self._lock:
                self._subscriptions.pop(subscription_id, None)

        return unsubscribe

    def publish(self, events: list[ChangeEvent]) -> None:
        """Deliver events to every matching subscriber."""
        with self._lock:
            subscriptions = list(self._subscriptions.values())
        for change in events:
            for subscription in subscriptions:
                if subscription.table != change.table:
                    continue
                if subscription.predicate is not None and not subscription.predicate(change):
                    continue
                try:
                    subscription.callback(change)
                except Exception:
                    # The write is already committed; one bad subscriber must not fail the request.
                    logger.exception("Change subscriber failed for %s %s", change.table, change.action)

    def attach(self, target: Session | type[Session] | Any) -> None:
        """Start collecting changes from a session, a Session class or a sessionmaker."""
        event.listen(target, "after_flush", self._collect)
        event.listen(target, "after_commit", self._dispatch)
        event.listen(target, "after_rollback", self._discard)

    def detach(self, target: Session | type[Session] | Any) -> None:
        event.remove(target, "after_flush", self._collect)
        event.remove(target, "after_commit", self._dispatch)
        event.remove(target, "after_rollback", self._discard)

    def _collect(self, session: Session, flush_context: Any) -> None:
        pending: list[ChangeEvent] = session.info.setdefault(_PENDING_KEY, [])
        for instance in session.new:
            pending.append(ChangeEvent(instance.__tablename__, "insert", _snapshot(instance)))
        for instance in session.dirty:
            if session.is_modified(instance, include_collections=False):
                pending.append(ChangeEvent(instance.__tablename__, "update", _snapshot(instance)))
        for instance in session.deleted:
            pending.append(ChangeEvent(instance.__tablename__, "delete", _snapshot(instance)))

    def _dispatch(self, session: Session) -> None:
        pending = session.info.pop(_PENDING_KEY, [])
        if pending:
            self.publish(pending)

    def _discard(self, session: Session) -> None:
        session.info.pop(_PENDING_KEY, None)


class _ChangeFeedSingleton:
    _instance: ChangeFeed | None = None

    @classmethod
    def get_instance(cls) -> ChangeFeed:
        if cls._instance is None:
            cls._instance = ChangeFeed()
        return cls._instance


def get_change_feed() -> ChangeFeed:
    """Return the process-wide change feed."""
    return _ChangeFeedSingleton.get_instance()
