"""Clip events to a grid and order them into priority rows.

Two independent passes:

1. ``clip_segments`` turns ``(event, location)`` pairs into grid-relative
   ``EventSegment`` objects, dropping anything off the grid.
2. ``assign_priority_rows`` first-fit packs the globally sorted segments
   into rows. Only the resulting *order* is consumed by the week stacker.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Optional, Sequence

from vibecal.layout.dates import diff_in_days, format_date_key, parse_date_key, to_minutes
from vibecal.layout.grid import index_by_date_key
from vibecal.models import CalendarEvent, DayCell, EventSegment

logger = logging.getLogger(__name__)

EventEntry = tuple[CalendarEvent, Any]  # (event, opaque location handle)
EventRows = list[list[EventSegment]]


def build_event_id(event: CalendarEvent, index: int) -> str:
    """Stable id for an event: its own id, or title + date + list position."""
    if event.id:
        return event.id
    return f"{event.title}-{event.date or event.start_date or 'event'}-{index}"


def split_multi_day(event: CalendarEvent) -> Optional[tuple[str, str, int]]:
    """Return the event's inclusive (start, end, span) day range.

    An end date before the start collapses onto the start. Events without
    a usable date give None.
    """
    if not event.date:
        return None
    try:
        # Round-trip so keys like '2026-3-5' still compare as strings.
        start = format_date_key(parse_date_key(event.date))
        end = format_date_key(parse_date_key(event.end_date or event.date))
    except ValueError:
        logger.debug("Skipping %r: unparseable date range", event)
        return None
    span = diff_in_days(start, end) + 1
    if span < 1:
        end, span = start, 1
    return start, end, span


def clip_segments(entries: Iterable[EventEntry], grid: Sequence[DayCell]) -> list[EventSegment]:
    """Clip every placeable event to ``[grid[0], grid[-1]]``.

    Segments come back in input order; call ``sort_segments`` for the
    layout order.
    """
    if not grid:
        return []
    date_to_index = index_by_date_key(grid)
    grid_start = grid[0].key
    grid_end = grid[-1].key
    segments: list[EventSegment] = []

    for index, (event, location) in enumerate(entries):
        part = split_multi_day(event)
        if part is None:
            continue
        start, end, _span = part
        if end < grid_start or start > grid_end:
            continue
        clipped_start = max(start, grid_start)
        clipped_end = min(end, grid_end)
        start_index = date_to_index.get(clipped_start)
        end_index = date_to_index.get(clipped_end)
        if start_index is None or end_index is None:
            continue
        event_id = build_event_id(event, index)
        if event.id != event_id:
            event = replace(event, id=event_id)
        segments.append(
            EventSegment(
                id=event_id,
                event=event,
                location=location,
                start=clipped_start,
                end=clipped_end,
                span=(parse_date_key(clipped_end) - parse_date_key(clipped_start)).days + 1,
                start_index=start_index,
                end_index=end_index,
            )
        )

    logger.debug("Clipped %d segment(s) onto a %d-day grid", len(segments), len(grid))
    return segments


def _time_title_key(event: CalendarEvent) -> tuple:
    """Start time ascending with untimed last, then case-insensitive title."""
    minutes = to_minutes(event.start_time)
    return (minutes is None, minutes or 0, (event.title or "").lower())


def segment_sort_key(segment: EventSegment) -> tuple:
    """Global layout order.

    Earlier start first, then longer span first. Time and title only break
    ties between single-day segments; equal multi-day segments keep their
    input order.
    """
    tail = _time_title_key(segment.event) if segment.span == 1 else (False, 0, "")
    return (segment.start_index, -segment.span, *tail)


def sort_segments(segments: Iterable[EventSegment]) -> list[EventSegment]:
    return sorted(segments, key=segment_sort_key)


def _collides(row: list[EventSegment], segment: EventSegment) -> bool:
    return any(
        not (segment.end_index < other.start_index or segment.start_index > other.end_index)
        for other in row
    )


def assign_priority_rows(ordered: Iterable[EventSegment]) -> EventRows:
    """First-fit pack *ordered* segments into rows with no index overlap."""
    rows: EventRows = []
    for segment in ordered:
        for row in rows:
            if not _collides(row, segment):
                row.append(segment)
                break
        else:
            rows.append([segment])
    return rows


def build_event_rows(entries: Iterable[EventEntry], grid: Sequence[DayCell]) -> EventRows:
    """Clip, sort and pack events for *grid*."""
    return assign_priority_rows(sort_segments(clip_segments(entries, grid)))


def flatten_rows(rows: EventRows) -> list[EventSegment]:
    """Row-major flattening of priority rows."""
    return [segment for row in rows for segment in row]


def segments_on_day(rows: EventRows, date_key: str) -> list[EventSegment]:
    """All segments whose clipped range covers *date_key*, in row order."""
    return [s for s in flatten_rows(rows) if s.start <= date_key <= s.end]
