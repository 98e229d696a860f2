"""Tests for Markdown and JSON rendering."""

from __future__ import annotations

import json

from vibecal.layout.agenda import build_agenda
from vibecal.layout.segments import build_event_rows
from vibecal.layout.stacking import get_week_event_layout
from vibecal.layout.timed import build_timed_day_entries
from vibecal.models import CalendarEvent
from vibecal.renderer import render_agenda, render_timed_days, render_week_layout, to_json


def test_week_layout_marks_continuations(feb_grid, make_entries) -> None:
    events = [
        CalendarEvent(title="Conf", date="2026-02-05", end_date="2026-02-10", all_day=True),
        CalendarEvent(title="Done", date="2026-02-09", start_time="14:00", completed=True),
    ]
    rows = build_event_rows(make_entries(*events), feb_grid)

    first = render_week_layout(get_week_event_layout(rows, 0, 6, 3), feb_grid[0:7])
    assert first == "- [0] Thu 5 - Sat 7: Conf (continues)"

    second = render_week_layout(get_week_event_layout(rows, 7, 13, 3), feb_grid[7:14])
    assert second.splitlines() == [
        "- [0] Sun 8 - Tue 10: Conf (continued)",
        "- [1] Mon 9: 14:00 ~~Done~~",
    ]


def test_empty_week(feb_grid) -> None:
    assert render_week_layout(get_week_event_layout([], 0, 6, 3), feb_grid[0:7]) == "*No events.*"


def test_timed_days(feb_grid, make_segment) -> None:
    segment = make_segment(
        CalendarEvent(title="Call", date="2026-02-02", start_time="09:00", end_time="09:45"), feb_grid
    )
    text = render_timed_days(
        ["2026-02-02", "2026-02-03"],
        [build_timed_day_entries([segment], "2026-02-02"), []],
    )
    assert "### Monday, February 2, 2026" in text
    assert "- 09:00 - 09:45 Call (column 1/1)" in text
    assert "*No timed events.*" in text


def test_agenda(feb_week, make_entries) -> None:
    events = [
        CalendarEvent(title="Holiday", date="2026-02-02", all_day=True),
        CalendarEvent(title="Call", date="2026-02-02", start_time="09:00", end_time="09:45"),
    ]
    text = render_agenda(build_agenda(build_event_rows(make_entries(*events), feb_week), feb_week))
    lines = text.splitlines()
    monday = lines.index("## Monday, February 2, 2026")
    assert lines[monday + 2:monday + 4] == ["- all-day Holiday", "- 09:00 - 09:45 Call"]
    assert text.count("*No events.*") == 6


def test_to_json_handles_nested_layouts(feb_week, make_entries) -> None:
    rows = build_event_rows(make_entries(CalendarEvent(title="A", date="2026-02-03")), feb_week)
    data = json.loads(to_json({"layout": get_week_event_layout(rows, 0, 6, 2), "days": ["2026-02-03"]}))
    placement = data["layout"]["single_day_placements"][0]
    assert placement["cell_index"] == 2
    assert placement["segment"]["event"]["title"] == "A"
    assert data["days"] == ["2026-02-03"]
