"""In-memory repositories for events, sessions and the activity timeline."""

from __future__ import annotations

import threading
from collections import defaultdict

from agenda.domain.models import Event, Session, SessionStatus, TimelineEntry


class EventRepository:
    """Dict-backed store for Event instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())


class SessionRepository:
    """Dict-backed store for Session instances, keyed by id.

    ``list_for_event`` returns sessions in insertion order; callers that
    care about time order sort for themselves. Writers for the same event
    must hold ``lock_for(event_id)`` across validate-then-insert. Locks are
    created on first use and live as long as the repository; there is no
    event deletion to prune them on.
    """

    def __init__(self) -> None:
        self._store: dict[str, Session] = {}
        self._locks: dict[str, threading.RLock] = defaultdict(threading.RLock)
        self._locks_guard = threading.Lock()

    def lock_for(self, event_id: str) -> threading.RLock:
        with self._locks_guard:
            return self._locks[event_id]

    def add(self, session: Session) -> None:
        self._store[session.id] = session

    def add_many(self, sessions: list[Session]) -> None:
        for session in sessions:
            self.add(session)

    def get(self, session_id: str) -> Session | None:
        return self._store.get(session_id)

    def list_for_event(self, event_id: str) -> list[Session]:
        return [s for s in self._store.values() if s.event_id == event_id]

    def update(self, session: Session) -> None:
        if session.id in self._store:
            self._store[session.id] = session

    def update_status(self, session_id: str, status: SessionStatus) -> None:
        session = self._store.get(session_id)
        if session is not None:
            session.status = status

    def delete(self, session_id: str) -> None:
        self._store.pop(session_id, None)


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_event(self, event_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.event_id == event_id],
            key=lambda e: e.timestamp,
        )
