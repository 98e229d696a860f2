"""Render layouts as Markdown text or JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any, Sequence

from vibecal.layout.agenda import AgendaDay
from vibecal.layout.dates import format_time, to_minutes
from vibecal.layout.grid import get_week_bounds
from vibecal.models import DayCell, TimedEventPlacement, WeekEventLayout, WeekPlacement

logger = logging.getLogger(__name__)


def _format_date_heading(iso_date: str) -> str:
    """Convert '2026-02-15' to 'Sunday, February 15, 2026'."""
    dt = datetime.strptime(iso_date, "%Y-%m-%d")
    return dt.strftime("%A, %B %d, %Y").replace(" 0", " ")


def _format_short_date(iso_date: str) -> str:
    """Convert '2026-02-15' to 'Sun 15'."""
    dt = datetime.strptime(iso_date, "%Y-%m-%d")
    return dt.strftime("%a %d").replace(" 0", " ")


def _format_month_heading(year: int, month: int) -> str:
    return datetime(year, month, 1).strftime("%B %Y")


# ------------------------------------------------------------------
# Entries
# ------------------------------------------------------------------

def _render_placement(placement: WeekPlacement, week_cells: Sequence[DayCell]) -> str:
    event = placement.segment.event
    first = week_cells[placement.column_start - 1].key
    last = week_cells[placement.column_start + placement.span_in_week - 2].key
    days = _format_short_date(first)
    if last != first:
        days = f"{days} - {_format_short_date(last)}"

    marks = []
    if not placement.is_span_start:
        marks.append("continued")
    if not placement.is_span_end:
        marks.append("continues")
    suffix = f" ({', '.join(marks)})" if marks else ""

    time_str = f" {event.start_time}" if event.start_time and not event.all_day else ""
    done = "~~" if event.completed else ""
    return f"- [{placement.week_row}] {days}:{time_str} {done}{event.title}{done}{suffix}"


def _render_timed(placement: TimedEventPlacement) -> str:
    start = format_time(placement.start_minutes)
    end = format_time(placement.end_minutes)
    column = f"{placement.column + 1}/{placement.column_count}"
    return f"- {start} - {end} {placement.segment.event.title} (column {column})"


# ------------------------------------------------------------------
# Documents
# ------------------------------------------------------------------

def render_week_layout(layout: WeekEventLayout, week_cells: Sequence[DayCell]) -> str:
    """Render one week's stacked placements and overflow counts."""
    lines: list[str] = []
    ordered = sorted(layout.placements, key=lambda p: (p.week_row, p.column_start))
    for placement in ordered:
        lines.append(_render_placement(placement, week_cells))
    hidden = [
        f"{_format_short_date(cell.key)} +{count} more"
        for cell, count in zip(week_cells, layout.hidden_counts_by_day)
        if count
    ]
    if hidden:
        lines.append(f"- {', '.join(hidden)}")
    if not lines:
        lines.append("*No events.*")
    return "\n".join(lines)


def render_month(
    year: int,
    month: int,
    grid: Sequence[DayCell],
    layouts: Sequence[WeekEventLayout],
) -> str:
    """Render a month as one section per grid week."""
    lines: list[str] = [f"# {_format_month_heading(year, month)}", ""]
    for week_index, layout in enumerate(layouts):
        start, end = get_week_bounds(week_index)
        week_cells = grid[start:end + 1]
        lines.append(f"## Week of {_format_date_heading(week_cells[0].key)}")
        lines.append("")
        lines.append(render_week_layout(layout, week_cells))
        lines.append("")
    return "\n".join(lines)


def render_timed_days(
    day_keys: Sequence[str],
    timed_by_day: Sequence[Sequence[TimedEventPlacement]],
) -> str:
    """Render timed placements day by day."""
    lines: list[str] = []
    for day_key, placements in zip(day_keys, timed_by_day):
        lines.append(f"### {_format_date_heading(day_key)}")
        lines.append("")
        if placements:
            ordered = sorted(placements, key=lambda p: (p.start_minutes, p.column))
            lines.extend(_render_timed(p) for p in ordered)
        else:
            lines.append("*No timed events.*")
        lines.append("")
    return "\n".join(lines)


def render_agenda(days: Sequence[AgendaDay]) -> str:
    """Render a list view of the given days."""
    lines: list[str] = []
    for day in days:
        lines.append(f"## {_format_date_heading(day.key)}")
        lines.append("")
        if day.is_empty:
            lines.append("*No events.*")
        for segment in day.all_day:
            lines.append(f"- all-day {segment.event.title}")
        for segment in day.timed:
            start = to_minutes(segment.event.start_time) or 0
            end = to_minutes(segment.event.end_time)
            end = start if end is None else end
            lines.append(f"- {format_time(start)} - {format_time(end)} {segment.event.title}")
        lines.append("")
    logger.debug("Rendered agenda for %d day(s)", len(days))
    return "\n".join(lines)


def to_json(value: Any) -> str:
    """Serialize layout dataclasses (or lists of them) to JSON."""

    def convert(item: Any) -> Any:
        if is_dataclass(item) and not isinstance(item, type):
            return asdict(item)
        if isinstance(item, dict):
            return {key: convert(val) for key, val in item.items()}
        if isinstance(item, (list, tuple)):
            return [convert(i) for i in item]
        return item

    return json.dumps(convert(value), indent=2, ensure_ascii=False)
