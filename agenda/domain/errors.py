"""Domain errors raised by the scheduling service."""

from __future__ import annotations

from agenda.domain.models import Conflict, ErrorCode


class SchedulingError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(SchedulingError):
    def __init__(self, event_id: str) -> None:
        super().__init__(ErrorCode.EVENT_NOT_FOUND, "Event not found")
        self.event_id = event_id


class SessionNotFoundError(SchedulingError):
    def __init__(self, session_id: str) -> None:
        super().__init__(ErrorCode.SESSION_NOT_FOUND, "Session not found")
        self.session_id = session_id


class EventAlreadyEndedError(SchedulingError):
    """Raised when sessions are added to an event whose window has passed."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            ErrorCode.EVENT_ALREADY_ENDED,
            "Cannot create sessions for an event that has already ended",
        )
        self.event_id = event_id


class EmptyBatchError(SchedulingError):
    def __init__(self) -> None:
        super().__init__(ErrorCode.EMPTY_BATCH, "At least one session is required")


class SessionConflictError(SchedulingError):
    """Raised when a candidate session fails validation.

    Carries the structured :class:`Conflict` so callers can render the
    blocking session and suggestion without parsing the message.
    """

    def __init__(self, conflict: Conflict) -> None:
        super().__init__(conflict.kind, conflict.message)
        self.conflict = conflict
