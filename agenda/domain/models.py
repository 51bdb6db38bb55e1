"""Domain models for event session scheduling."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import StrEnum

from pydantic import AwareDatetime, BaseModel, Field, computed_field, model_validator


class SessionType(StrEnum):
    TALK = "talk"
    WORKSHOP = "workshop"
    BREAK = "break"
    MEAL = "meal"
    ACTIVITY = "activity"
    CEREMONY = "ceremony"
    OTHER = "other"


class SessionStatus(StrEnum):
    POSTPONED = "postponed"
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TemporalStatus(StrEnum):
    """Where a session sits relative to *now*; derived, never stored."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    ENDED = "ended"


class ErrorCode(StrEnum):
    EVENT_NOT_FOUND = "event_not_found"
    SESSION_NOT_FOUND = "session_not_found"
    EVENT_ALREADY_ENDED = "event_already_ended"
    EMPTY_BATCH = "empty_batch"
    INVALID_RANGE = "invalid_range"
    BEFORE_EVENT_START = "before_event_start"
    AFTER_EVENT_END = "after_event_end"
    OVERLAP_WITH_EXISTING = "overlap_with_existing"
    OVERLAP_WITHIN_BATCH = "overlap_within_batch"


class SuggestionKind(StrEnum):
    AFTER_BLOCKING = "after_blocking"
    GAP = "gap"
    AFTER_LAST = "after_last"
    BOOKED = "booked"
    ANY_OTHER = "any_other"


class TimelineEntryType(StrEnum):
    SESSION_CREATED = "session_created"
    SESSION_UPDATED = "session_updated"
    STATUS_CHANGED = "status_changed"
    SESSION_DELETED = "session_deleted"
    CONFLICT_REJECTED = "conflict_rejected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    starts_at: AwareDatetime
    ends_at: AwareDatetime
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _ends_after_start(self) -> Event:
        if self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self


class SessionBase(BaseModel):
    # No start < end validator here: the overlap validator reports bad
    # ranges as INVALID_RANGE instead. Times must carry a UTC offset.
    title: str
    start_time: AwareDatetime
    end_time: AwareDatetime
    description: str | None = None
    date: datetime | None = None
    location: str | None = None
    speaker: str | None = None
    type: SessionType = SessionType.OTHER
    status: SessionStatus = SessionStatus.UPCOMING

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


class Session(SessionBase):
    id: str = Field(default_factory=_new_id)
    event_id: str
    created_at: datetime = Field(default_factory=_utcnow)


class TimeSlot(BaseModel):
    """The minimal window shape the scheduling engine reports back."""

    title: str
    start_time: AwareDatetime
    end_time: AwareDatetime
    session_id: str | None = None

    @classmethod
    def of(cls, session: SessionBase) -> TimeSlot:
        return cls(
            title=session.title,
            start_time=session.start_time,
            end_time=session.end_time,
            session_id=getattr(session, "id", None),
        )


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Validation outcomes
# ---------------------------------------------------------------------------


class SlotSuggestion(BaseModel):
    kind: SuggestionKind
    text: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    booked: list[TimeSlot] = Field(default_factory=list)


class Conflict(BaseModel):
    kind: ErrorCode
    message: str
    candidate_title: str | None = None
    blocking_session_id: str | None = None
    blocking_title: str | None = None
    blocking_window: TimeSlot | None = None
    other_candidate_title: str | None = None
    suggestion: SlotSuggestion | None = None

    @property
    def out_of_bounds(self) -> bool:
        return self.kind in (ErrorCode.BEFORE_EVENT_START, ErrorCode.AFTER_EVENT_END)

    @property
    def suggestion_text(self) -> str | None:
        return self.suggestion.text if self.suggestion else None


class ValidationOutcome(BaseModel):
    """Either accepted (``conflict is None``) or a single Conflict."""

    conflict: Conflict | None = None

    @computed_field
    @property
    def accepted(self) -> bool:
        return self.conflict is None

    @classmethod
    def accept(cls) -> ValidationOutcome:
        return cls()

    @classmethod
    def reject(cls, conflict: Conflict) -> ValidationOutcome:
        return cls(conflict=conflict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventCreate(BaseModel):
    name: str
    starts_at: AwareDatetime
    ends_at: AwareDatetime

    @model_validator(mode="after")
    def _ends_after_start(self) -> EventCreate:
        if self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self


class SessionCreate(SessionBase):
    pass


class BatchCreateRequest(BaseModel):
    sessions: list[SessionCreate]


class SessionForm(BaseModel):
    """Raw form fields: a calendar date plus two clock times."""

    title: str
    date: str
    start: str
    end: str
    description: str | None = None
    location: str | None = None
    speaker: str | None = None
    type: SessionType = SessionType.OTHER
    status: SessionStatus = SessionStatus.UPCOMING


class SessionUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    date: datetime | None = None
    start_time: AwareDatetime | None = None
    end_time: AwareDatetime | None = None
    location: str | None = None
    speaker: str | None = None
    type: SessionType | None = None
    status: SessionStatus | None = None


class StatusUpdate(BaseModel):
    status: SessionStatus
