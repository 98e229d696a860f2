"""Tests for event serialization and date/time helpers."""

from __future__ import annotations

import pytest

from vibecal.layout.dates import (
    add_days,
    diff_in_days,
    format_time,
    is_cross_midnight,
    is_timed_event,
    normalize_end_date,
    normalize_event_color,
    normalize_hex_color,
    normalize_range,
    to_minutes,
)
from vibecal.models import CalendarEvent


def test_to_dict_uses_camel_case_and_skips_unset() -> None:
    event = CalendarEvent(title="Trip", date="2026-02-05", end_date="2026-02-07", all_day=True)
    assert event.to_dict() == {
        "title": "Trip",
        "date": "2026-02-05",
        "endDate": "2026-02-07",
        "allDay": True,
        "taskEvent": False,
        "completed": False,
    }


def test_from_dict_accepts_both_key_styles() -> None:
    camel = CalendarEvent.from_dict({"title": "A", "startTime": "09:00", "daysOfWeek": ["mo"], "extra": 1})
    snake = CalendarEvent.from_dict({"title": "A", "start_time": "09:00", "days_of_week": ["mo"]})
    assert camel == snake
    assert camel.days_of_week == ["mo"]


def test_from_dict_coerces_flags() -> None:
    event = CalendarEvent.from_dict({"title": "A", "allDay": 1, "completed": 0, "skipDates": None})
    assert event.all_day is True
    assert event.completed is False
    assert event.skip_dates == []


def test_repr() -> None:
    event = CalendarEvent(title="Trip", date="2026-02-05", end_date="2026-02-07", start_time="08:00")
    assert repr(event) == "<CalendarEvent 'Trip' on 2026-02-05..2026-02-07 08:00>"
    assert repr(CalendarEvent(title="Later")) == "<CalendarEvent 'Later' on ?>"


@pytest.mark.parametrize(
    "value,expected",
    [("09:30", 570), ("00:00", 0), ("23:59", 1439), ("9:05", 545), ("24:00", None), ("12:60", None),
     ("noon", None), ("1230", None), ("", None), (None, None)],
)
def test_to_minutes(value, expected) -> None:
    assert to_minutes(value) == expected


def test_format_time_clamps() -> None:
    assert format_time(570) == "09:30"
    assert format_time(-5) == "00:00"
    assert format_time(2000) == "24:00"


def test_date_arithmetic() -> None:
    assert add_days("2026-02-28", 1) == "2026-03-01"
    assert add_days("2026-03-01", -1) == "2026-02-28"
    assert diff_in_days("2026-02-10", "2026-02-05") == -5
    assert normalize_range("2026-02-10", "2026-02-05") == ("2026-02-05", "2026-02-10")
    assert normalize_end_date("2026-02-10", "2026-02-05") == "2026-02-10"
    assert normalize_end_date("2026-02-10", "2026-02-12") == "2026-02-12"


def test_timed_predicates() -> None:
    overnight = CalendarEvent(title="A", date="2026-02-02", end_date="2026-02-03", start_time="22:00", end_time="01:00")
    assert is_cross_midnight(overnight)
    assert is_timed_event(overnight)
    assert not is_timed_event(CalendarEvent(title="B", date="2026-02-02", start_time="10:00", end_time="10:00"))
    assert not is_timed_event(CalendarEvent(title="C", start_time="10:00", end_time="11:00"))
    assert not is_cross_midnight(CalendarEvent(title="D", date="2026-02-02", end_date="2026-02-02"))


def test_colors() -> None:
    assert normalize_event_color("  teal ") == "teal"
    assert normalize_event_color("   ") is None
    assert normalize_hex_color("#abc") == "#AABBCC"
    assert normalize_hex_color(" #a1b2c3 ") == "#A1B2C3"
    assert normalize_hex_color("abc") is None
    assert normalize_hex_color("#abcd") is None
