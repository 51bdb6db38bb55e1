"""All-or-nothing validation for a batch of candidate sessions."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import tzinfo
from itertools import combinations

from agenda.domain.models import (
    Conflict,
    ErrorCode,
    Event,
    Session,
    SessionBase,
    ValidationOutcome,
)
from agenda.services.conflicts import validate_session
from agenda.services.intervals import sessions_overlap
from agenda.services.suggestions import DEFAULT_BOOKED_SLOTS_SHOWN


def validate_batch(
    candidates: Sequence[SessionBase],
    existing_sessions: Sequence[Session],
    event: Event,
    display_tz: tzinfo | None = None,
    booked_slots_shown: int = DEFAULT_BOOKED_SLOTS_SHOWN,
) -> ValidationOutcome:
    """Validate every candidate before any of them may be persisted.

    Phase 1 checks each candidate against the stored sessions only. Phase 2
    checks each unordered pair of candidates, in input order, against each
    other. Both phases stop at the first failure. An empty batch is
    rejected with ``EMPTY_BATCH``.
    """
    if not candidates:
        return ValidationOutcome.reject(
            Conflict(kind=ErrorCode.EMPTY_BATCH, message="At least one session is required")
        )

    for candidate in candidates:
        outcome = validate_session(
            candidate,
            existing_sessions,
            event,
            display_tz=display_tz,
            booked_slots_shown=booked_slots_shown,
        )
        if not outcome.accepted:
            return outcome

    # Candidates have no stored id yet, so no suggestion is offered here.
    for first, second in combinations(candidates, 2):
        if sessions_overlap(first, second):
            return ValidationOutcome.reject(
                Conflict(
                    kind=ErrorCode.OVERLAP_WITHIN_BATCH,
                    candidate_title=first.title,
                    other_candidate_title=second.title,
                    message=(
                        f'Time conflict: "{first.title}" and "{second.title}" have '
                        "overlapping times. Please adjust the schedule."
                    ),
                )
            )

    return ValidationOutcome.accept()
