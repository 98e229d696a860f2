"""Date-key and minute helpers shared by the layout engine.

Date keys are ISO ``YYYY-MM-DD`` strings, so they compare correctly as
plain strings. Times are naive wall-clock minutes since midnight.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from vibecal.models import CalendarEvent

MINUTES_IN_DAY = 24 * 60
SLOT_MINUTES = 30


def parse_date_key(value: str) -> date:
    """Convert '2026-02-15' to a ``date``."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_date_key(value: date) -> str:
    """Convert a ``date`` to '2026-02-15'."""
    return value.isoformat()


def add_days(key: str, days: int) -> str:
    return format_date_key(parse_date_key(key) + timedelta(days=days))


def diff_in_days(start: str, end: str) -> int:
    """Whole calendar days from *start* to *end* (negative if end is earlier)."""
    return (parse_date_key(end) - parse_date_key(start)).days


def compare_date_key(a: str, b: str) -> int:
    return -1 if a < b else 1 if a > b else 0


def normalize_range(anchor: str, hover: str) -> tuple[str, str]:
    """Order two date keys as (start, end)."""
    if compare_date_key(anchor, hover) <= 0:
        return anchor, hover
    return hover, anchor


def normalize_end_date(start_key: str, end_key: str) -> str:
    """Collapse an end date that falls before the start onto the start."""
    if compare_date_key(end_key, start_key) < 0:
        return start_key
    return end_key


# ------------------------------------------------------------------
# Times
# ------------------------------------------------------------------

def to_minutes(value: Optional[str]) -> Optional[int]:
    """Convert '19:30' to total minutes (1170).

    Returns None for missing, malformed or out-of-range values.
    """
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) < 2:
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if not 0 <= hours <= 23 or not 0 <= minutes <= 59:
        return None
    return hours * 60 + minutes


def clamp_minutes(value: int) -> int:
    return max(0, min(MINUTES_IN_DAY, value))


def format_time(minutes: int) -> str:
    """Convert 1170 to '19:30'. Values are clamped to 00:00-24:00."""
    safe = clamp_minutes(minutes)
    return f"{safe // 60:02d}:{safe % 60:02d}"


def duration_minutes(start: int, end: int) -> int:
    return max(0, end - start)


# ------------------------------------------------------------------
# Event predicates
# ------------------------------------------------------------------

def is_cross_midnight(event: CalendarEvent) -> bool:
    return bool(event.end_date and event.date and event.end_date != event.date)


def is_timed_event(event: CalendarEvent) -> bool:
    """Whether the event belongs on a time grid rather than the all-day row.

    Same-day events need an end after the start; multi-day ones only need
    both times to parse.
    """
    if event.all_day or not event.date:
        return False
    start = to_minutes(event.start_time)
    end = to_minutes(event.end_time)
    if start is None or end is None:
        return False
    if is_cross_midnight(event):
        return True
    return end > start


# ------------------------------------------------------------------
# Colors
# ------------------------------------------------------------------

def normalize_event_color(color: Optional[str]) -> Optional[str]:
    if not color:
        return None
    trimmed = color.strip()
    return trimmed or None


def normalize_hex_color(value: Optional[str]) -> Optional[str]:
    """Expand '#abc' to '#AABBCC'; anything not hex-shaped gives None."""
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed.startswith("#"):
        return None
    upper = trimmed.upper()
    if len(upper) == 4:
        return "#" + "".join(char * 2 for char in upper[1:])
    if len(upper) == 7:
        return upper
    return None
