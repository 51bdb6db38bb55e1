"""FastAPI application: entry point for the session scheduling service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import AwareDatetime

from agenda.core.config import load_config
from agenda.domain.bus import EventBus
from agenda.domain.errors import SchedulingError, SessionConflictError
from agenda.domain.handlers import HandlerRegistry
from agenda.domain.models import (
    BatchCreateRequest,
    ErrorCode,
    Event,
    EventCreate,
    Session,
    SessionCreate,
    SessionForm,
    SessionUpdate,
    StatusUpdate,
    TimelineEntry,
    ValidationOutcome,
)
from agenda.repos.memory import EventRepository, SessionRepository, TimelineRepository
from agenda.services.clock import SystemClock
from agenda.services.parser import parse_session_form
from agenda.services.scheduling import SchedulingService

config = load_config()

logging.basicConfig(level=config.log_level)

app = FastAPI(title="Session Scheduling Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
event_repo = EventRepository()
session_repo = SessionRepository()
timeline_repo = TimelineRepository()

handler_registry = HandlerRegistry(bus=event_bus, timeline_repo=timeline_repo)

scheduling = SchedulingService(
    event_repo=event_repo,
    session_repo=session_repo,
    timeline_repo=timeline_repo,
    bus=event_bus,
    clock=SystemClock(),
    config=config,
)

_STATUS_BY_CODE = {
    ErrorCode.EVENT_NOT_FOUND: 404,
    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.OVERLAP_WITH_EXISTING: 409,
    ErrorCode.OVERLAP_WITHIN_BATCH: 409,
    ErrorCode.INVALID_RANGE: 422,
    ErrorCode.BEFORE_EVENT_START: 422,
    ErrorCode.AFTER_EVENT_END: 422,
}


@app.exception_handler(SchedulingError)
async def _scheduling_error(request: Request, exc: SchedulingError) -> JSONResponse:
    body: dict = {"code": exc.code.value, "detail": exc.message}
    if isinstance(exc, SessionConflictError):
        body["conflict"] = exc.conflict.model_dump(mode="json")
    return JSONResponse(status_code=_STATUS_BY_CODE.get(exc.code, 400), content=body)


# ── Events ────────────────────────────────────────────────────────────


@app.post("/events", response_model=Event, status_code=201)
def create_event(payload: EventCreate) -> Event:
    return scheduling.create_event(payload)


@app.get("/events", response_model=list[Event])
def list_events() -> list[Event]:
    """Return all stored events."""
    return scheduling.list_events()


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    return scheduling.get_event(event_id)


@app.get("/events/{event_id}/timeline", response_model=list[TimelineEntry])
def get_timeline(event_id: str) -> list[TimelineEntry]:
    """Return the activity log for an event, oldest first."""
    return scheduling.timeline(event_id)


# ── Sessions ──────────────────────────────────────────────────────────


@app.get("/events/{event_id}/sessions", response_model=list[Session])
def list_sessions(event_id: str) -> list[Session]:
    """Return an event's sessions, earliest first."""
    return scheduling.list_sessions(event_id)


@app.post("/events/{event_id}/sessions", response_model=Session, status_code=201)
def create_session(event_id: str, payload: SessionCreate) -> Session:
    return scheduling.create_session(event_id, payload)


@app.post(
    "/events/{event_id}/sessions/batch", response_model=list[Session], status_code=201
)
def create_sessions(event_id: str, payload: BatchCreateRequest) -> list[Session]:
    """Create several sessions at once; either all are stored or none are."""
    return scheduling.create_sessions(event_id, payload.sessions)


@app.post("/events/{event_id}/sessions/form", response_model=Session, status_code=201)
def create_session_from_form(event_id: str, payload: SessionForm) -> Session:
    """Create a session from a calendar date and two clock times."""
    try:
        candidate = parse_session_form(payload, config.display_tz())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return scheduling.create_session(event_id, candidate)


@app.post("/events/{event_id}/sessions/check", response_model=ValidationOutcome)
def check_sessions(event_id: str, payload: BatchCreateRequest) -> ValidationOutcome:
    """Validate candidates without storing them."""
    return scheduling.check_sessions(event_id, payload.sessions)


@app.get("/events/{event_id}/sessions/current-and-upcoming", response_model=list[Session])
def current_and_upcoming(
    event_id: str, now: AwareDatetime | None = None
) -> list[Session]:
    """Sessions ongoing at *now* or starting after it, earliest first.

    Pass *now* as a query param to control the clock; defaults to the
    current UTC time.
    """
    return scheduling.current_and_upcoming(event_id, now)


@app.get("/events/{event_id}/sessions/current", response_model=Session | None)
def current_session(event_id: str, now: AwareDatetime | None = None) -> Session | None:
    return scheduling.current_session(event_id, now)


@app.get("/events/{event_id}/sessions/next", response_model=Session | None)
def next_session(event_id: str, now: AwareDatetime | None = None) -> Session | None:
    return scheduling.next_session(event_id, now)


@app.patch("/sessions/{session_id}", response_model=Session)
def update_session(session_id: str, payload: SessionUpdate) -> Session:
    return scheduling.update_session(session_id, payload)


@app.patch("/sessions/{session_id}/status", response_model=Session)
def update_session_status(session_id: str, payload: StatusUpdate) -> Session:
    return scheduling.update_status(session_id, payload.status)


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str) -> dict:
    scheduling.delete_session(session_id)
    return {"success": True}
