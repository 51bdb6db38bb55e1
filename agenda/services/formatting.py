"""Human-readable rendering of session times for conflict messages."""

from __future__ import annotations

from datetime import datetime, tzinfo

from dateutil import tz as dateutil_tz

from agenda.domain.models import TimeSlot


def format_time(moment: datetime, display_tz: tzinfo | None = None) -> str:
    """Render a clock time as ``h:MM AM``, e.g. ``9:05 AM`` or ``12:30 PM``."""
    local = moment.astimezone(display_tz or dateutil_tz.UTC)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {meridiem}"


def format_date(moment: datetime, display_tz: tzinfo | None = None) -> str:
    """Render a short calendar date, e.g. ``Jan 5``."""
    local = moment.astimezone(display_tz or dateutil_tz.UTC)
    return f"{local.strftime('%b')} {local.day}"


def format_range(start: datetime, end: datetime, display_tz: tzinfo | None = None) -> str:
    return f"{format_time(start, display_tz)} - {format_time(end, display_tz)}"


def format_window(slot: TimeSlot, display_tz: tzinfo | None = None) -> str:
    """Range plus the day it falls on: ``10:00 AM - 11:00 AM on Jan 5``."""
    return (
        f"{format_range(slot.start_time, slot.end_time, display_tz)}"
        f" on {format_date(slot.start_time, display_tz)}"
    )
