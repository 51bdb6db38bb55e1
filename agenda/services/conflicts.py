"""Service for detecting scheduling conflicts between sessions."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import tzinfo

from agenda.domain.models import (
    Conflict,
    ErrorCode,
    Event,
    Session,
    SessionBase,
    TimeSlot,
    ValidationOutcome,
)
from agenda.services.formatting import format_window
from agenda.services.intervals import by_start_time, overlaps
from agenda.services.suggestions import DEFAULT_BOOKED_SLOTS_SHOWN, suggest_slot


def check_bounds(candidate: SessionBase, event: Event) -> Conflict | None:
    """Range and event-window checks, in that order."""
    title = candidate.title
    if candidate.start_time >= candidate.end_time:
        return Conflict(
            kind=ErrorCode.INVALID_RANGE,
            candidate_title=title,
            message=f'Session "{title}" has invalid time range',
        )
    if candidate.start_time < event.starts_at:
        return Conflict(
            kind=ErrorCode.BEFORE_EVENT_START,
            candidate_title=title,
            message=f'Session "{title}" starts before the event begins',
        )
    if candidate.end_time > event.ends_at:
        return Conflict(
            kind=ErrorCode.AFTER_EVENT_END,
            candidate_title=title,
            message=f'Session "{title}" ends after the event ends',
        )
    return None


def validate_session(
    candidate: SessionBase,
    existing_sessions: Sequence[Session],
    event: Event,
    display_tz: tzinfo | None = None,
    booked_slots_shown: int = DEFAULT_BOOKED_SLOTS_SHOWN,
) -> ValidationOutcome:
    """Check one candidate against the event window and the stored sessions.

    Existing sessions are scanned in ``start_time`` order, so when several
    overlap the candidate the earliest-starting one is reported as blocking,
    whatever order the store returned them in.
    """
    bounds_conflict = check_bounds(candidate, event)
    if bounds_conflict is not None:
        return ValidationOutcome.reject(bounds_conflict)

    for existing in by_start_time(existing_sessions):
        if not overlaps(
            candidate.start_time, candidate.end_time, existing.start_time, existing.end_time
        ):
            continue

        suggestion = suggest_slot(
            candidate.duration,
            existing_sessions,
            event.ends_at,
            existing,
            display_tz=display_tz,
            booked_slots_shown=booked_slots_shown,
        )
        window = TimeSlot.of(existing)
        return ValidationOutcome.reject(
            Conflict(
                kind=ErrorCode.OVERLAP_WITH_EXISTING,
                candidate_title=candidate.title,
                message=(
                    f'Time conflict: "{candidate.title}" overlaps with "{existing.title}" '
                    f"({format_window(window, display_tz)}). {suggestion.text}."
                ),
                blocking_session_id=existing.id,
                blocking_title=existing.title,
                blocking_window=window,
                suggestion=suggestion,
            )
        )

    return ValidationOutcome.accept()
