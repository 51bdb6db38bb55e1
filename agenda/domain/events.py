"""Domain events emitted as sessions are scheduled and changed."""

from __future__ import annotations

from pydantic import BaseModel

from agenda.domain.models import Conflict, SessionStatus


class SessionCreated(BaseModel):
    """Fired after one or more sessions are persisted in a single write."""

    event_id: str
    session_ids: list[str]


class SessionUpdated(BaseModel):
    event_id: str
    session_id: str
    fields: list[str]


class SessionStatusChanged(BaseModel):
    """Fired when a session's persisted status is explicitly set."""

    event_id: str
    session_id: str
    previous: SessionStatus
    current: SessionStatus


class SessionDeleted(BaseModel):
    event_id: str
    session_id: str
    title: str


class ConflictRejected(BaseModel):
    """Fired when a write is refused because validation found a conflict."""

    event_id: str
    conflict: Conflict
