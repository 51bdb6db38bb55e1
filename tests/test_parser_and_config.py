"""Tests for form parsing and environment-driven configuration."""

from datetime import datetime, timezone

import pytest
from dateutil import tz as dateutil_tz

from agenda.core.config import AppConfig, load_config
from agenda.domain.models import SessionForm, SessionType
from agenda.services.formatting import format_date, format_time
from agenda.services.parser import parse_session_form


def _form(**overrides) -> SessionForm:
    defaults = dict(
        title="Opening",
        date="2026-03-05",
        start="09:30",
        end="11:00",
        type=SessionType.CEREMONY,
    )
    defaults.update(overrides)
    return SessionForm(**defaults)


# ---------------------------------------------------------------------------
# Form parsing
# ---------------------------------------------------------------------------


def test_form_times_default_to_utc():
    candidate = parse_session_form(_form())

    assert candidate.title == "Opening"
    assert candidate.type == SessionType.CEREMONY
    assert candidate.start_time == datetime(2026, 3, 5, 9, 30, tzinfo=timezone.utc)
    assert candidate.end_time == datetime(2026, 3, 5, 11, 0, tzinfo=timezone.utc)
    assert candidate.date == datetime(2026, 3, 5, tzinfo=timezone.utc)


def test_form_times_are_read_in_local_timezone():
    candidate = parse_session_form(_form(), dateutil_tz.gettz("America/New_York"))

    assert candidate.start_time == datetime(2026, 3, 5, 14, 30, tzinfo=timezone.utc)
    assert candidate.end_time == datetime(2026, 3, 5, 16, 0, tzinfo=timezone.utc)


def test_form_with_unreadable_date_raises():
    with pytest.raises(ValueError):
        parse_session_form(_form(date="xyzzy"))


def test_form_keeps_reversed_times_for_validator():
    candidate = parse_session_form(_form(start="11:00", end="09:30"))
    assert candidate.start_time > candidate.end_time


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def test_format_time_twelve_hour_clock():
    assert format_time(datetime(2026, 3, 5, 0, 5, tzinfo=timezone.utc)) == "12:05 AM"
    assert format_time(datetime(2026, 3, 5, 12, 0, tzinfo=timezone.utc)) == "12:00 PM"
    assert format_time(datetime(2026, 3, 5, 15, 45, tzinfo=timezone.utc)) == "3:45 PM"


def test_format_date_short_month():
    assert format_date(datetime(2026, 3, 5, 10, tzinfo=timezone.utc)) == "Mar 5"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def test_load_config_defaults(monkeypatch):
    for name in ("AGENDA_DISPLAY_TIMEZONE", "AGENDA_BOOKED_SLOTS_SHOWN", "AGENDA_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.display_timezone == "UTC"
    assert config.booked_slots_shown == 3
    assert config.log_level == "INFO"


def test_load_config_from_env(monkeypatch):
    monkeypatch.setenv("AGENDA_DISPLAY_TIMEZONE", "Asia/Kolkata")
    monkeypatch.setenv("AGENDA_BOOKED_SLOTS_SHOWN", "5")
    monkeypatch.setenv("AGENDA_LOG_LEVEL", "debug")

    config = load_config()

    assert config.display_timezone == "Asia/Kolkata"
    assert config.booked_slots_shown == 5
    assert config.log_level == "DEBUG"


def test_load_config_ignores_non_numeric_slot_count(monkeypatch):
    monkeypatch.setenv("AGENDA_BOOKED_SLOTS_SHOWN", "lots")
    assert load_config().booked_slots_shown == 3


def test_unknown_display_timezone_falls_back_to_utc():
    moment = datetime(2026, 3, 5, 10, tzinfo=timezone.utc)
    display_tz = AppConfig(display_timezone="Nowhere/Special").display_tz()
    assert moment.astimezone(display_tz).hour == 10


def test_load_config_clamps_zero_slot_count(monkeypatch):
    monkeypatch.setenv("AGENDA_BOOKED_SLOTS_SHOWN", "0")
    assert load_config().booked_slots_shown == 1
