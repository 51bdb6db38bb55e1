"""Scheduling service: load, validate under the event lock, then persist."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from agenda.core.config import AppConfig
from agenda.domain.bus import EventBus
from agenda.domain.errors import (
    EmptyBatchError,
    EventAlreadyEndedError,
    EventNotFoundError,
    SessionConflictError,
    SessionNotFoundError,
)
from agenda.domain.events import (
    ConflictRejected,
    SessionCreated,
    SessionDeleted,
    SessionStatusChanged,
    SessionUpdated,
)
from agenda.domain.models import (
    ErrorCode,
    Event,
    EventCreate,
    Session,
    SessionBase,
    SessionCreate,
    SessionStatus,
    SessionUpdate,
    TimelineEntry,
    ValidationOutcome,
)
from agenda.repos.memory import EventRepository, SessionRepository, TimelineRepository
from agenda.services import timing
from agenda.services.batch import validate_batch
from agenda.services.clock import Clock
from agenda.services.conflicts import validate_session
from agenda.services.intervals import by_start_time

logger = logging.getLogger(__name__)

_TIME_FIELDS = {"start_time", "end_time"}


class SchedulingService:
    """Orchestrates the pure validators against the repositories.

    Every write to an event's sessions happens while holding that event's
    lock, so the snapshot that was validated is the one that gets extended.
    """

    def __init__(
        self,
        event_repo: EventRepository,
        session_repo: SessionRepository,
        timeline_repo: TimelineRepository,
        bus: EventBus,
        clock: Clock,
        config: AppConfig,
    ) -> None:
        self.event_repo = event_repo
        self.session_repo = session_repo
        self.timeline_repo = timeline_repo
        self.bus = bus
        self.clock = clock
        self.config = config

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def create_event(self, data: EventCreate) -> Event:
        event = Event(name=data.name, starts_at=data.starts_at, ends_at=data.ends_at)
        self.event_repo.add(event)
        logger.info("created event %s (%s)", event.id, event.name)
        return event

    def list_events(self) -> list[Event]:
        return self.event_repo.list_all()

    def get_event(self, event_id: str) -> Event:
        event = self.event_repo.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def check_sessions(
        self, event_id: str, candidates: Sequence[SessionBase]
    ) -> ValidationOutcome:
        """Dry run: validate *candidates* against the current snapshot without writing."""
        event = self.get_event(event_id)
        existing = self.session_repo.list_for_event(event_id)
        return self._validate(candidates, existing, event)

    def _validate(
        self,
        candidates: Sequence[SessionBase],
        existing: Sequence[Session],
        event: Event,
    ) -> ValidationOutcome:
        options = dict(
            display_tz=self.config.display_tz(),
            booked_slots_shown=self.config.booked_slots_shown,
        )
        if len(candidates) == 1:
            return validate_session(candidates[0], existing, event, **options)
        return validate_batch(candidates, existing, event, **options)

    def _raise_for(self, event_id: str, outcome: ValidationOutcome) -> None:
        conflict = outcome.conflict
        if conflict is None:
            return
        if conflict.kind == ErrorCode.EMPTY_BATCH:
            raise EmptyBatchError()
        self.bus.publish(ConflictRejected(event_id=event_id, conflict=conflict))
        raise SessionConflictError(conflict)

    def _ensure_open(self, event: Event) -> None:
        if self.clock.now() > event.ends_at:
            raise EventAlreadyEndedError(event.id)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, event_id: str, candidate: SessionCreate) -> Session:
        return self.create_sessions(event_id, [candidate])[0]

    def create_sessions(
        self, event_id: str, candidates: Sequence[SessionCreate]
    ) -> list[Session]:
        """Persist every candidate, or none of them.

        Raises:
            EventNotFoundError: If the event does not exist.
            EventAlreadyEndedError: If the event's window is in the past.
            EmptyBatchError: If *candidates* is empty.
            SessionConflictError: If any candidate fails validation.
        """
        event = self.get_event(event_id)
        self._ensure_open(event)
        if not candidates:
            raise EmptyBatchError()

        with self.session_repo.lock_for(event_id):
            existing = self.session_repo.list_for_event(event_id)
            self._raise_for(event_id, self._validate(candidates, existing, event))

            sessions = [
                Session(event_id=event_id, **candidate.model_dump())
                for candidate in candidates
            ]
            self.session_repo.add_many(sessions)

        logger.info("scheduled %d session(s) for event %s", len(sessions), event_id)
        self.bus.publish(
            SessionCreated(event_id=event_id, session_ids=[s.id for s in sessions])
        )
        return sessions

    def list_sessions(self, event_id: str) -> list[Session]:
        self.get_event(event_id)
        return by_start_time(self.session_repo.list_for_event(event_id))

    def get_session(self, session_id: str) -> Session:
        session = self.session_repo.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def update_session(self, session_id: str, changes: SessionUpdate) -> Session:
        """Patch the given fields; a moved window is re-validated against its siblings."""
        event_id = self.get_session(session_id).event_id
        updates = changes.model_dump(exclude_unset=True, exclude_none=True)

        event = self.get_event(event_id)
        with self.session_repo.lock_for(event_id):
            # Re-read: another writer may have moved or deleted it meanwhile.
            session = self.get_session(session_id)
            if not updates:
                return session
            updated = session.model_copy(update=updates)
            if _TIME_FIELDS & updates.keys():
                siblings = [
                    s
                    for s in self.session_repo.list_for_event(event_id)
                    if s.id != session.id
                ]
                outcome = self._validate([updated], siblings, event)
                self._raise_for(event_id, outcome)
            self.session_repo.update(updated)

        self.bus.publish(
            SessionUpdated(
                event_id=event_id,
                session_id=session.id,
                fields=sorted(updates),
            )
        )
        return updated

    def update_status(self, session_id: str, status: SessionStatus) -> Session:
        """Set the persisted status; any status may follow any other."""
        event_id = self.get_session(session_id).event_id
        with self.session_repo.lock_for(event_id):
            session = self.get_session(session_id)
            previous = session.status
            self.session_repo.update_status(session_id, status)
        self.bus.publish(
            SessionStatusChanged(
                event_id=event_id,
                session_id=session_id,
                previous=previous,
                current=status,
            )
        )
        return self.get_session(session_id)

    def delete_session(self, session_id: str) -> None:
        event_id = self.get_session(session_id).event_id
        with self.session_repo.lock_for(event_id):
            session = self.get_session(session_id)
            self.session_repo.delete(session_id)
        logger.info("deleted session %s from event %s", session_id, session.event_id)
        self.bus.publish(
            SessionDeleted(
                event_id=session.event_id, session_id=session_id, title=session.title
            )
        )

    # ------------------------------------------------------------------
    # Clock-relative queries
    # ------------------------------------------------------------------

    def current_and_upcoming(
        self, event_id: str, now: datetime | None = None
    ) -> list[Session]:
        self.get_event(event_id)
        return timing.current_and_upcoming(
            self.session_repo.list_for_event(event_id), now or self.clock.now()
        )

    def current_session(self, event_id: str, now: datetime | None = None) -> Session | None:
        event = self.event_repo.get(event_id)
        if event is None:
            return None
        return timing.current_session(
            self.session_repo.list_for_event(event_id), event, now or self.clock.now()
        )

    def next_session(self, event_id: str, now: datetime | None = None) -> Session | None:
        event = self.event_repo.get(event_id)
        if event is None:
            return None
        return timing.next_session(
            self.session_repo.list_for_event(event_id), event, now or self.clock.now()
        )

    def timeline(self, event_id: str) -> list[TimelineEntry]:
        self.get_event(event_id)
        return self.timeline_repo.list_for_event(event_id)
