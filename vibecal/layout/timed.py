"""Timed events on a single day's minute axis.

``build_timed_day_entries`` projects segments (and the live geometry of
an event being dragged or resized) onto one day, and ``assign_columns``
lays overlapping blocks out side by side.
"""

from __future__ import annotations

import logging
from typing import Iterable, NamedTuple, Optional

from vibecal.layout.dates import (
    MINUTES_IN_DAY,
    clamp_minutes,
    duration_minutes,
    is_timed_event,
    normalize_range,
    to_minutes,
)
from vibecal.layout.interaction import derive_timed_drag_range, derive_timed_resize_range
from vibecal.layout.segments import split_multi_day
from vibecal.models import (
    DragGesture,
    EventSegment,
    Gesture,
    NoGesture,
    ResizeGesture,
    TimedEventPlacement,
    TimeRange,
)

logger = logging.getLogger(__name__)


class TimedEntry(NamedTuple):
    segment: EventSegment
    day_offset: int
    start_minutes: int
    end_minutes: int


def _column_order_key(entry: TimedEntry) -> tuple:
    return (
        entry.start_minutes,
        -duration_minutes(entry.start_minutes, entry.end_minutes),
        entry.segment.event.title,
    )


def assign_columns(entries: Iterable[TimedEntry]) -> list[TimedEventPlacement]:
    """Sweep-line column assignment for one day's timed entries.

    Each entry takes the lowest column no still-running entry uses. After
    every insertion the current cluster width is pushed to all running
    entries, so a cluster shares one ``column_count``; entries that have
    already ended keep the last width they saw.
    """
    result: list[TimedEventPlacement] = []
    active: list[TimedEventPlacement] = []
    for entry in sorted(entries, key=_column_order_key):
        active = [item for item in active if item.end_minutes > entry.start_minutes]
        used = {item.column for item in active}
        column = 0
        while column in used:
            column += 1
        placement = TimedEventPlacement(
            segment=entry.segment,
            day_offset=entry.day_offset,
            start_minutes=entry.start_minutes,
            end_minutes=entry.end_minutes,
            column=column,
        )
        active.append(placement)
        column_count = max(item.column for item in active) + 1
        for item in active:
            item.column_count = max(item.column_count, column_count)
        result.append(placement)
    return result


def _covers(day_key: str, start_key: str, end_key: str) -> bool:
    return start_key <= day_key <= end_key


def _live_range(gesture: Gesture, kind: type) -> Optional[tuple[EventSegment, TimeRange]]:
    if not isinstance(gesture, kind) or gesture.hover_minutes is None:
        return None
    if kind is DragGesture:
        live = derive_timed_drag_range(gesture.segment, gesture.hover_date_key, gesture.hover_minutes)
    else:
        live = derive_timed_resize_range(gesture.segment, gesture.hover_date_key, gesture.hover_minutes)
    return gesture.segment, live


def build_timed_day_entries(
    segments: Iterable[EventSegment],
    day_key: str,
    day_offset: int = 0,
    gesture: Gesture = NoGesture(),
) -> list[TimedEventPlacement]:
    """Timed placements for *day_key*, with columns assigned.

    Multi-day timed events run from their start time to midnight on the
    first day, cover whole days in between, and end at their end time on
    the last day. Zero-length slices are dropped.

    A time-grid resize adds the resized event on days its live range
    reaches that its stored times do not. A time-grid drag replaces the
    dragged event's slice on every day the live range covers.
    """
    entries: list[TimedEntry] = []

    def push(segment: EventSegment, start_minutes: int, end_minutes: int) -> None:
        start = clamp_minutes(start_minutes)
        end = clamp_minutes(end_minutes)
        if end <= start:
            return
        entries.append(TimedEntry(segment, day_offset, start, end))

    for segment in segments:
        event = segment.event
        if not is_timed_event(event):
            continue
        bounds = split_multi_day(event)
        if bounds is None:
            continue
        start_key, end_key, _span = bounds
        if not _covers(day_key, start_key, end_key):
            continue
        start = to_minutes(event.start_time) if day_key == start_key else 0
        end = to_minutes(event.end_time) if day_key == end_key else MINUTES_IN_DAY
        push(segment, start if start is not None else 0, end if end is not None else MINUTES_IN_DAY)

    resize = _live_range(gesture, ResizeGesture)
    if resize is not None:
        resizing, live = resize
        range_start, range_end = normalize_range(live.start_date_key, live.end_date_key)
        already_shown = any(entry.segment.id == resizing.id for entry in entries)
        if _covers(day_key, range_start, range_end) and not already_shown:
            start = (to_minutes(resizing.event.start_time) or 0) if day_key == range_start else 0
            end = live.end_minutes if day_key == range_end else MINUTES_IN_DAY
            push(resizing, start, end)

    drag = _live_range(gesture, DragGesture)
    if drag is not None:
        dragging, live = drag
        range_start, range_end = normalize_range(live.start_date_key, live.end_date_key)
        if _covers(day_key, range_start, range_end):
            entries = [entry for entry in entries if entry.segment.id != dragging.id]
            start = live.start_minutes if day_key == range_start else 0
            end = live.end_minutes if day_key == range_end else MINUTES_IN_DAY
            push(dragging, start, end)

    logger.debug("%s: %d timed entr%s", day_key, len(entries), "y" if len(entries) == 1 else "ies")
    return assign_columns(entries)


def build_timed_week(
    segments: Iterable[EventSegment],
    day_keys: Iterable[str],
    gesture: Gesture = NoGesture(),
) -> list[list[TimedEventPlacement]]:
    """``build_timed_day_entries`` for each day of a week, in order."""
    segment_list = list(segments)
    return [
        build_timed_day_entries(segment_list, day_key, offset, gesture)
        for offset, day_key in enumerate(day_keys)
    ]
