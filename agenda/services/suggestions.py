"""Service for suggesting an alternative slot when a session conflicts."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta, tzinfo

from agenda.domain.models import Session, SlotSuggestion, SuggestionKind, TimeSlot
from agenda.services.formatting import format_range, format_time
from agenda.services.intervals import by_start_time, overlaps

DEFAULT_BOOKED_SLOTS_SHOWN = 3


def suggest_slot(
    duration: timedelta,
    existing_sessions: Sequence[Session],
    event_end: datetime,
    blocking: Session,
    display_tz: tzinfo | None = None,
    booked_slots_shown: int = DEFAULT_BOOKED_SLOTS_SHOWN,
) -> SlotSuggestion:
    """Greedy earliest-fit suggestion for a candidate of *duration*.

    Tries, in order: right after the blocking session, the first gap between
    consecutive sessions that is long enough, right after the last session.
    If none fit, lists the earliest booked slots instead.

    The suggestion is a heuristic. Only the checks named above are applied,
    so it is not guaranteed to validate against every session.
    """
    ordered = by_start_time(existing_sessions)

    # -- immediately after the blocking session ----------------------------
    after_blocking = blocking.end_time
    if after_blocking + duration <= event_end:
        clash = any(
            s.id != blocking.id
            and overlaps(after_blocking, after_blocking + duration, s.start_time, s.end_time)
            for s in ordered
        )
        if not clash:
            return SlotSuggestion(
                kind=SuggestionKind.AFTER_BLOCKING,
                text=f"Try starting at {format_time(after_blocking, display_tz)}",
                start_time=after_blocking,
                end_time=after_blocking + duration,
            )

    # -- first gap that fits -----------------------------------------------
    for current, following in zip(ordered, ordered[1:]):
        gap_start = current.end_time
        if following.start_time - gap_start >= duration:
            return SlotSuggestion(
                kind=SuggestionKind.GAP,
                text=f"Try {format_range(gap_start, gap_start + duration, display_tz)}",
                start_time=gap_start,
                end_time=gap_start + duration,
            )

    # -- after the last session --------------------------------------------
    if ordered:
        last_end = ordered[-1].end_time
        if last_end + duration <= event_end:
            return SlotSuggestion(
                kind=SuggestionKind.AFTER_LAST,
                text=f"Try starting at {format_time(last_end, display_tz)}",
                start_time=last_end,
                end_time=last_end + duration,
            )

    booked = [TimeSlot.of(s) for s in ordered[:booked_slots_shown]]
    if booked:
        listed = ", ".join(
            format_range(slot.start_time, slot.end_time, display_tz) for slot in booked
        )
        return SlotSuggestion(
            kind=SuggestionKind.BOOKED,
            text=f"Already booked: {listed}. Please choose a different time",
            booked=booked,
        )

    return SlotSuggestion(
        kind=SuggestionKind.ANY_OTHER,
        text="Please choose a different time slot",
    )
