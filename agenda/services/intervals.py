"""Strict-overlap predicate shared by the validators and the suggester."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TypeVar

from agenda.domain.models import SessionBase

S = TypeVar("S", bound=SessionBase)


def overlaps(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """True if ``[a_start, a_end)`` and ``[b_start, b_end)`` share any instant.

    Touching endpoints (``a_end == b_start``) do not overlap.
    """
    return a_start < b_end and a_end > b_start


def sessions_overlap(a: SessionBase, b: SessionBase) -> bool:
    return overlaps(a.start_time, a.end_time, b.start_time, b.end_time)


def by_start_time(sessions: Iterable[S]) -> list[S]:
    """Stable ascending sort on ``start_time``; ties keep input order."""
    return sorted(sessions, key=lambda s: s.start_time)
