"""Shared fixtures for layout tests."""

from __future__ import annotations

from datetime import date

import pytest

from vibecal.layout.grid import build_month_grid, build_week_grid
from vibecal.layout.segments import clip_segments
from vibecal.models import CalendarEvent, DayCell, EventLocation, EventSegment


@pytest.fixture
def feb_grid() -> list[DayCell]:
    """February 2026 month grid, Sunday first: 2026-02-01 .. 2026-03-14."""
    return build_month_grid(2026, 2, 0)


@pytest.fixture
def feb_week() -> list[DayCell]:
    """Week grid 2026-02-01 (Sunday) .. 2026-02-07."""
    return build_week_grid(date(2026, 2, 4), 0)


def entries_for(*events: CalendarEvent) -> list[tuple[CalendarEvent, EventLocation]]:
    return [(event, EventLocation(path="events.json", line_number=i)) for i, event in enumerate(events)]


@pytest.fixture
def make_entries():
    """Pair events with fake storage locations."""
    return entries_for


@pytest.fixture
def make_segment():
    """Clip a single event onto a grid and return its segment."""

    def _make(event: CalendarEvent, grid: list[DayCell]) -> EventSegment:
        return clip_segments(entries_for(event), grid)[0]

    return _make
