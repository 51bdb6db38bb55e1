"""Derived, clock-relative views of sessions.

The persisted ``status`` field and the temporal status computed here are
separate notions: a session stored as ``upcoming`` may well be ongoing right
now. Nothing in this module writes back to a session.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from agenda.domain.models import Event, Session, SessionStatus, TemporalStatus
from agenda.services.intervals import by_start_time


def persisted_status(session: Session) -> SessionStatus:
    return session.status


def temporal_status(session: Session, now: datetime) -> TemporalStatus:
    """Upcoming before start, ongoing through end (inclusive), ended after."""
    if now < session.start_time:
        return TemporalStatus.UPCOMING
    if now <= session.end_time:
        return TemporalStatus.ONGOING
    return TemporalStatus.ENDED


def current_and_upcoming(sessions: Sequence[Session], now: datetime) -> list[Session]:
    """Sessions that are ongoing or still to come, earliest first."""
    return by_start_time(
        s for s in sessions if temporal_status(s, now) != TemporalStatus.ENDED
    )


def current_session(
    sessions: Sequence[Session], event: Event, now: datetime
) -> Session | None:
    """The most recently started ongoing session, if the event is still running."""
    if now > event.ends_at:
        return None
    ongoing = [s for s in sessions if temporal_status(s, now) == TemporalStatus.ONGOING]
    if not ongoing:
        return None
    return max(ongoing, key=lambda s: s.start_time)


def next_session(
    sessions: Sequence[Session], event: Event, now: datetime
) -> Session | None:
    if now > event.ends_at:
        return None
    upcoming = by_start_time(
        s for s in sessions if temporal_status(s, now) == TemporalStatus.UPCOMING
    )
    return upcoming[0] if upcoming else None
