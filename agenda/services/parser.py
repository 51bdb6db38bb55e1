"""Service for turning form-style date and clock strings into a SessionCreate."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo

import dateparser
from dateutil import tz as dateutil_tz

from agenda.domain.models import SessionCreate, SessionForm

_SETTINGS = {
    "RETURN_AS_TIMEZONE_AWARE": False,
    "DATE_ORDER": "YMD",
}


def _parse_local(raw: str, local_tz: tzinfo) -> datetime | None:
    """Parse *raw* with ``dateparser`` as wall-clock time in *local_tz*, returned in UTC."""
    result = dateparser.parse(raw, settings=_SETTINGS)
    if result is None:
        return None
    return result.replace(tzinfo=local_tz).astimezone(timezone.utc)


def parse_session_form(form: SessionForm, local_tz: tzinfo | None = None) -> SessionCreate:
    """Combine the form's date with its start and end clock times.

    ``"2026-03-05"`` with ``"09:30"`` and ``"11am"`` yields a session from
    09:30 to 11:00 on that day, interpreted in *local_tz* (UTC by default).
    Raises ``ValueError`` if any of the three strings cannot be parsed. The
    start/end ordering is left for the overlap validator to judge.
    """
    local_tz = local_tz or dateutil_tz.UTC

    parsed_day = dateparser.parse(form.date, settings=_SETTINGS)
    if parsed_day is None:
        raise ValueError(f"Could not understand date {form.date!r}")
    day = (
        parsed_day.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=local_tz)
        .astimezone(timezone.utc)
    )

    start_time = _parse_local(f"{form.date} {form.start}", local_tz)
    if start_time is None:
        raise ValueError(f"Could not understand start time {form.start!r}")

    end_time = _parse_local(f"{form.date} {form.end}", local_tz)
    if end_time is None:
        raise ValueError(f"Could not understand end time {form.end!r}")

    return SessionCreate(
        title=form.title,
        description=form.description,
        date=day,
        start_time=start_time,
        end_time=end_time,
        location=form.location,
        speaker=form.speaker,
        type=form.type,
        status=form.status,
    )
