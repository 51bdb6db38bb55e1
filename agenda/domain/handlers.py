"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

import logging

from agenda.domain.bus import EventBus
from agenda.domain.events import (
    ConflictRejected,
    SessionCreated,
    SessionDeleted,
    SessionStatusChanged,
    SessionUpdated,
)
from agenda.domain.models import TimelineEntry, TimelineEntryType
from agenda.repos.memory import TimelineRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus so every change lands on the timeline."""

    def __init__(self, bus: EventBus, timeline_repo: TimelineRepository) -> None:
        self.bus = bus
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(SessionCreated, self.on_session_created)
        self.bus.subscribe(SessionUpdated, self.on_session_updated)
        self.bus.subscribe(SessionStatusChanged, self.on_status_changed)
        self.bus.subscribe(SessionDeleted, self.on_session_deleted)
        self.bus.subscribe(ConflictRejected, self.on_conflict_rejected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_session_created(self, event: SessionCreated) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.SESSION_CREATED,
                payload={"session_ids": event.session_ids},
            )
        )

    def on_session_updated(self, event: SessionUpdated) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.SESSION_UPDATED,
                payload={"session_id": event.session_id, "fields": event.fields},
            )
        )

    def on_status_changed(self, event: SessionStatusChanged) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.STATUS_CHANGED,
                payload={
                    "session_id": event.session_id,
                    "from": event.previous.value,
                    "to": event.current.value,
                },
            )
        )

    def on_session_deleted(self, event: SessionDeleted) -> None:
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.SESSION_DELETED,
                payload={"session_id": event.session_id, "title": event.title},
            )
        )

    def on_conflict_rejected(self, event: ConflictRejected) -> None:
        conflict = event.conflict
        logger.info(
            "rejected session %r for event %s: %s",
            conflict.candidate_title,
            event.event_id,
            conflict.kind.value,
        )
        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.CONFLICT_REJECTED,
                payload={
                    "kind": conflict.kind.value,
                    "candidate_title": conflict.candidate_title,
                    "blocking_session_id": conflict.blocking_session_id,
                    "other_candidate_title": conflict.other_candidate_title,
                },
            )
        )
