"""End-to-end tests for the session scheduling HTTP API."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from agenda.domain.models import SessionForm
from agenda.main import (
    app,
    create_session_from_form,
    event_repo,
    scheduling,
    session_repo,
    timeline_repo,
)
from agenda.services.clock import FixedClock

_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clear_repos():
    """Reset in-memory repos and pin the clock before each test."""
    original_clock = scheduling.clock
    scheduling.clock = FixedClock(_NOW)
    event_repo._store.clear()
    session_repo._store.clear()
    timeline_repo._entries.clear()
    yield
    event_repo._store.clear()
    session_repo._store.clear()
    timeline_repo._entries.clear()
    scheduling.clock = original_clock


@pytest.fixture()
def client():
    return TestClient(app)


def _iso(hour: int, minute: int = 0) -> str:
    return f"2026-03-05T{hour:02d}:{minute:02d}:00Z"


def _create_event(client: TestClient) -> str:
    resp = client.post(
        "/events",
        json={"name": "DevFest", "starts_at": _iso(9), "ends_at": _iso(18)},
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def _session_body(start: str, end: str, title: str = "Talk", **extra) -> dict:
    return {"title": title, "start_time": start, "end_time": end, **extra}


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def test_create_and_get_event(client: TestClient):
    event_id = _create_event(client)

    resp = client.get(f"/events/{event_id}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "DevFest"
    assert len(client.get("/events").json()) == 1


def test_event_with_reversed_window_is_422(client: TestClient):
    resp = client.post(
        "/events",
        json={"name": "Backwards", "starts_at": _iso(18), "ends_at": _iso(9)},
    )
    assert resp.status_code == 422


def test_missing_event_is_404(client: TestClient):
    resp = client.get("/events/not-found")
    assert resp.status_code == 404
    assert resp.json() == {"code": "event_not_found", "detail": "Event not found"}


# ---------------------------------------------------------------------------
# Creating sessions
# ---------------------------------------------------------------------------


def test_create_session(client: TestClient):
    event_id = _create_event(client)

    resp = client.post(
        f"/events/{event_id}/sessions",
        json=_session_body(_iso(10), _iso(11), "Keynote", type="talk", speaker="Ada"),
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["event_id"] == event_id
    assert body["type"] == "talk"
    assert body["status"] == "upcoming"


def test_overlap_returns_409_with_suggestion(client: TestClient):
    event_id = _create_event(client)
    keynote = client.post(
        f"/events/{event_id}/sessions", json=_session_body(_iso(10), _iso(11), "Keynote")
    ).json()

    resp = client.post(
        f"/events/{event_id}/sessions", json=_session_body(_iso(10, 30), _iso(11, 30))
    )

    assert resp.status_code == 409
    body = resp.json()
    assert body["code"] == "overlap_with_existing"
    assert body["conflict"]["blocking_session_id"] == keynote["id"]
    assert body["conflict"]["blocking_title"] == "Keynote"
    assert body["conflict"]["suggestion"]["kind"] == "after_blocking"
    assert body["conflict"]["suggestion"]["text"] == "Try starting at 11:00 AM"
    assert body["detail"].startswith('Time conflict: "Talk" overlaps with "Keynote"')


def test_before_event_start_is_422(client: TestClient):
    event_id = _create_event(client)

    resp = client.post(
        f"/events/{event_id}/sessions",
        json=_session_body("2026-03-05T08:59:59.999Z", _iso(10)),
    )

    assert resp.status_code == 422
    assert resp.json()["code"] == "before_event_start"
    assert resp.json()["conflict"]["suggestion"] is None


def test_ended_event_is_400(client: TestClient):
    event_id = _create_event(client)
    scheduling.clock.set(datetime(2026, 3, 6, tzinfo=timezone.utc))

    resp = client.post(f"/events/{event_id}/sessions", json=_session_body(_iso(10), _iso(11)))

    assert resp.status_code == 400
    assert resp.json()["code"] == "event_already_ended"


def test_batch_conflict_stores_nothing(client: TestClient):
    event_id = _create_event(client)

    resp = client.post(
        f"/events/{event_id}/sessions/batch",
        json={
            "sessions": [
                _session_body(_iso(9), _iso(10), "A"),
                _session_body(_iso(9, 30), _iso(10, 30), "B"),
                _session_body(_iso(11), _iso(12), "C"),
            ]
        },
    )

    assert resp.status_code == 409
    conflict = resp.json()["conflict"]
    assert conflict["kind"] == "overlap_within_batch"
    assert (conflict["candidate_title"], conflict["other_candidate_title"]) == ("A", "B")
    assert client.get(f"/events/{event_id}/sessions").json() == []


def test_empty_batch_is_400(client: TestClient):
    event_id = _create_event(client)

    resp = client.post(f"/events/{event_id}/sessions/batch", json={"sessions": []})

    assert resp.status_code == 400
    assert resp.json()["code"] == "empty_batch"


def test_batch_success_lists_sorted(client: TestClient):
    event_id = _create_event(client)

    resp = client.post(
        f"/events/{event_id}/sessions/batch",
        json={
            "sessions": [
                _session_body(_iso(13), _iso(14), "Afternoon"),
                _session_body(_iso(9), _iso(10), "Morning"),
            ]
        },
    )

    assert resp.status_code == 201
    titles = [s["title"] for s in client.get(f"/events/{event_id}/sessions").json()]
    assert titles == ["Morning", "Afternoon"]


def test_form_endpoint_parses_clock_times(client: TestClient):
    event_id = _create_event(client)

    resp = client.post(
        f"/events/{event_id}/sessions/form",
        json={"title": "Lunch", "date": "2026-03-05", "start": "12:00", "end": "13:00", "type": "meal"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert datetime.fromisoformat(body["start_time"]) == datetime(
        2026, 3, 5, 12, tzinfo=timezone.utc
    )


def test_form_endpoint_rejects_unreadable_date(client: TestClient):
    event_id = _create_event(client)

    resp = client.post(
        f"/events/{event_id}/sessions/form",
        json={"title": "Lunch", "date": "xyzzy", "start": "12:00", "end": "13:00"},
    )

    assert resp.status_code == 422


def test_form_parse_error_keeps_its_cause(client: TestClient):
    event_id = _create_event(client)
    form = SessionForm(title="Lunch", date="xyzzy", start="12:00", end="13:00")

    with pytest.raises(HTTPException) as exc_info:
        create_session_from_form(event_id, form)

    assert exc_info.value.status_code == 422
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_check_endpoint_reports_without_storing(client: TestClient):
    event_id = _create_event(client)
    client.post(f"/events/{event_id}/sessions", json=_session_body(_iso(10), _iso(11), "Keynote"))

    resp = client.post(
        f"/events/{event_id}/sessions/check",
        json={"sessions": [_session_body(_iso(10, 30), _iso(11, 30))]},
    )

    assert resp.status_code == 200
    assert resp.json()["accepted"] is False
    assert resp.json()["conflict"]["kind"] == "overlap_with_existing"
    assert len(client.get(f"/events/{event_id}/sessions").json()) == 1


# ---------------------------------------------------------------------------
# Updating, deleting, querying
# ---------------------------------------------------------------------------


def test_status_update_and_timeline(client: TestClient):
    event_id = _create_event(client)
    session = client.post(
        f"/events/{event_id}/sessions", json=_session_body(_iso(10), _iso(11))
    ).json()

    resp = client.patch(f"/sessions/{session['id']}/status", json={"status": "cancelled"})

    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
    types = [e["type"] for e in client.get(f"/events/{event_id}/timeline").json()]
    assert types == ["session_created", "status_changed"]


def test_invalid_status_is_422(client: TestClient):
    event_id = _create_event(client)
    session = client.post(
        f"/events/{event_id}/sessions", json=_session_body(_iso(10), _iso(11))
    ).json()

    resp = client.patch(f"/sessions/{session['id']}/status", json={"status": "paused"})
    assert resp.status_code == 422


def test_patch_session_moving_onto_sibling_is_409(client: TestClient):
    event_id = _create_event(client)
    client.post(f"/events/{event_id}/sessions", json=_session_body(_iso(10), _iso(11), "Keynote"))
    session = client.post(
        f"/events/{event_id}/sessions", json=_session_body(_iso(12), _iso(13))
    ).json()

    resp = client.patch(
        f"/sessions/{session['id']}",
        json={"start_time": _iso(10, 30), "end_time": _iso(11, 30)},
    )

    assert resp.status_code == 409


def test_delete_session(client: TestClient):
    event_id = _create_event(client)
    session = client.post(
        f"/events/{event_id}/sessions", json=_session_body(_iso(10), _iso(11))
    ).json()

    assert client.delete(f"/sessions/{session['id']}").json() == {"success": True}
    assert client.delete(f"/sessions/{session['id']}").status_code == 404


def test_current_and_next_with_explicit_now(client: TestClient):
    event_id = _create_event(client)
    client.post(
        f"/events/{event_id}/sessions/batch",
        json={
            "sessions": [
                _session_body(_iso(9), _iso(10), "Morning"),
                _session_body(_iso(11), _iso(12), "Late"),
            ]
        },
    )
    now = {"now": _iso(9, 30)}

    current = client.get(f"/events/{event_id}/sessions/current", params=now)
    upcoming = client.get(f"/events/{event_id}/sessions/next", params=now)
    both = client.get(f"/events/{event_id}/sessions/current-and-upcoming", params=now)

    assert current.json()["title"] == "Morning"
    assert upcoming.json()["title"] == "Late"
    assert [s["title"] for s in both.json()] == ["Morning", "Late"]


def test_current_is_null_between_sessions(client: TestClient):
    event_id = _create_event(client)
    client.post(f"/events/{event_id}/sessions", json=_session_body(_iso(9), _iso(10)))

    resp = client.get(f"/events/{event_id}/sessions/current", params={"now": _iso(10, 30)})

    assert resp.status_code == 200
    assert resp.json() is None


# ---------------------------------------------------------------------------
# Timestamps without a UTC offset
# ---------------------------------------------------------------------------


def test_naive_session_times_are_422(client: TestClient):
    event_id = _create_event(client)

    resp = client.post(
        f"/events/{event_id}/sessions",
        json=_session_body("2026-03-05T10:00:00", "2026-03-05T11:00:00"),
    )

    assert resp.status_code == 422
    assert client.get(f"/events/{event_id}/sessions").json() == []


def test_naive_event_window_is_422(client: TestClient):
    resp = client.post(
        "/events",
        json={
            "name": "Local",
            "starts_at": "2026-03-05T09:00:00",
            "ends_at": "2026-03-05T18:00:00",
        },
    )

    assert resp.status_code == 422
    assert client.get("/events").json() == []


def test_naive_now_is_422(client: TestClient):
    event_id = _create_event(client)

    resp = client.get(
        f"/events/{event_id}/sessions/current", params={"now": "2026-03-05T09:30:00"}
    )

    assert resp.status_code == 422


def test_naive_patch_times_are_422(client: TestClient):
    event_id = _create_event(client)
    session = client.post(
        f"/events/{event_id}/sessions", json=_session_body(_iso(10), _iso(11))
    ).json()

    resp = client.patch(
        f"/sessions/{session['id']}", json={"start_time": "2026-03-05T12:00:00"}
    )

    assert resp.status_code == 422
