"""Pointer mapping and live ranges for drag, resize and selection gestures.

Everything here is recomputed on each pointer move from the current
gesture snapshot. The ``commit_*`` helpers turn a finished gesture into
the updated ``CalendarEvent`` the caller hands to storage.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Sequence, Union

from vibecal.layout.dates import (
    MINUTES_IN_DAY,
    SLOT_MINUTES,
    add_days,
    clamp_minutes,
    compare_date_key,
    diff_in_days,
    format_time,
    normalize_end_date,
    normalize_range,
    to_minutes,
)
from vibecal.layout.grid import WEEK_DAYS
from vibecal.models import (
    CalendarEvent,
    DateRange,
    DayCell,
    DragGesture,
    EventSegment,
    Gesture,
    ResizeGesture,
    SelectGesture,
    TimeRange,
)

logger = logging.getLogger(__name__)

MONTH_GRID_ROWS = 6


@dataclass(frozen=True)
class GridRect:
    """Bounding rectangle of a grid element, in pointer coordinates."""

    left: float
    top: float
    width: float
    height: float


def _clamp_index(value: float, upper: int) -> int:
    if math.isnan(value):
        return 0
    return int(min(max(0, math.floor(value)), upper))


# ------------------------------------------------------------------
# Pointer -> date / time
# ------------------------------------------------------------------

def get_date_key_from_pointer(client_x: float, rect: GridRect, date_keys: Sequence[str]) -> Optional[str]:
    """Map a horizontal position on a 7-column grid to a date key."""
    if not rect.width or not date_keys:
        return None
    column_width = rect.width / WEEK_DAYS
    column = _clamp_index((client_x - rect.left) / column_width, WEEK_DAYS - 1)
    return date_keys[column] if column < len(date_keys) else None


def get_date_key_from_point(
    client_x: float,
    client_y: float,
    rect: GridRect,
    grid: Sequence[DayCell],
) -> Optional[str]:
    """Map a pointer position on a 6x7 month grid to a date key."""
    if not rect.width or not rect.height:
        return None
    column = _clamp_index((client_x - rect.left) / (rect.width / WEEK_DAYS), WEEK_DAYS - 1)
    row = _clamp_index((client_y - rect.top) / (rect.height / MONTH_GRID_ROWS), MONTH_GRID_ROWS - 1)
    index = row * WEEK_DAYS + column
    return grid[index].key if index < len(grid) else None


def get_minutes_from_pointer(
    client_y: float,
    rect: GridRect,
    slot_height: float,
    slot_minutes: int = SLOT_MINUTES,
) -> float:
    """Unsnapped minute offset of a vertical position, clamped to the day."""
    if slot_height <= 0:
        return 0.0
    relative = max(0.0, client_y - rect.top)
    return max(0.0, min(float(MINUTES_IN_DAY), relative / slot_height * slot_minutes))


def snap_minutes(minutes: float, step: int = SLOT_MINUTES) -> int:
    """Snap down to the slot granularity, clamped to the day."""
    snapped = math.floor(minutes / step) * step
    return clamp_minutes(int(snapped))


def get_time_grid_point(
    client_x: float,
    client_y: float,
    rect: GridRect,
    date_keys: Sequence[str],
    slot_height: float,
    slot_minutes: int = SLOT_MINUTES,
) -> Optional[tuple[str, int]]:
    """(date key, snapped minutes) under the pointer on a time grid."""
    date_key = get_date_key_from_pointer(client_x, rect, date_keys)
    if date_key is None:
        return None
    minutes = snap_minutes(get_minutes_from_pointer(client_y, rect, slot_height, slot_minutes), slot_minutes)
    return date_key, minutes


# ------------------------------------------------------------------
# All-day ranges
# ------------------------------------------------------------------

def _base_start(segment: EventSegment) -> str:
    return segment.event.date or segment.start


def get_shifted_date_range(start: str, end: str, target_start: str) -> DateRange:
    """Move the inclusive range [start, end] so it begins on *target_start*."""
    offset = diff_in_days(start, target_start)
    return DateRange(start=add_days(start, offset), end=add_days(end, offset))


def derive_drag_range(segment: EventSegment, hover_date_key: str) -> DateRange:
    base_start = _base_start(segment)
    base_end = segment.event.end_date or segment.event.date or segment.end
    return get_shifted_date_range(base_start, base_end, hover_date_key)


def derive_resize_range(segment: EventSegment, hover_date_key: str) -> DateRange:
    """The start stays fixed; the end follows the pointer but never precedes the start."""
    base_start = _base_start(segment)
    return DateRange(start=base_start, end=normalize_end_date(base_start, hover_date_key))


def normalize_date_selection(anchor_date_key: str, hover_date_key: str) -> DateRange:
    start, end = normalize_range(anchor_date_key, hover_date_key)
    return DateRange(start=start, end=end)


def derive_selection_range(selection: DateRange, index_by_key: Mapping[str, int]) -> Optional[tuple[int, int]]:
    """Grid index range ``(start, end)`` of a date selection, ordered."""
    start_index = index_by_key.get(selection.start)
    end_index = index_by_key.get(selection.end)
    if start_index is None or end_index is None:
        return None
    return (start_index, end_index) if start_index <= end_index else (end_index, start_index)


# ------------------------------------------------------------------
# Timed ranges
# ------------------------------------------------------------------

def get_shifted_timed_range(
    base_start_key: str,
    base_end_key: str,
    hover_key: str,
    base_start_minutes: int,
    base_end_minutes: int,
    hover_minutes: int,
) -> TimeRange:
    """Move a timed event so it starts at *hover_key*/*hover_minutes*.

    The total duration, counted across all the days the event spans, is
    kept; an end past midnight rolls over onto the following day(s).
    """
    base_span_days = diff_in_days(base_start_key, base_end_key)
    duration = max(0, base_span_days * MINUTES_IN_DAY + (base_end_minutes - base_start_minutes))
    start_minutes = clamp_minutes(hover_minutes)
    total_end = start_minutes + duration
    end_day_offset = total_end // MINUTES_IN_DAY
    return TimeRange(
        start_date_key=hover_key,
        end_date_key=add_days(hover_key, end_day_offset),
        start_minutes=start_minutes,
        end_minutes=total_end - end_day_offset * MINUTES_IN_DAY,
    )


def _timed_bounds(segment: EventSegment) -> tuple[str, str, int, int]:
    event = segment.event
    start_key = _base_start(segment)
    end_key = event.end_date or segment.end or start_key
    return start_key, end_key, to_minutes(event.start_time) or 0, to_minutes(event.end_time) or 0


def derive_timed_drag_range(segment: EventSegment, hover_date_key: str, hover_minutes: int) -> TimeRange:
    start_key, end_key, start_minutes, end_minutes = _timed_bounds(segment)
    return get_shifted_timed_range(start_key, end_key, hover_date_key, start_minutes, end_minutes, hover_minutes)


def derive_timed_resize_range(
    segment: EventSegment,
    hover_date_key: str,
    hover_minutes: Optional[int],
) -> TimeRange:
    """Start stays put; the end follows the pointer but never precedes the start."""
    start_key, _end_key, start_minutes, stored_end = _timed_bounds(segment)
    end_key = normalize_end_date(start_key, hover_date_key)
    end_minutes = stored_end if hover_minutes is None else hover_minutes
    if end_key == start_key:
        end_minutes = max(start_minutes, end_minutes)
    return TimeRange(
        start_date_key=start_key,
        end_date_key=end_key,
        start_minutes=start_minutes,
        end_minutes=clamp_minutes(end_minutes),
    )


def normalize_time_selection(
    anchor_date_key: str,
    anchor_minutes: int,
    hover_date_key: str,
    hover_minutes: int,
    slot_minutes: int = SLOT_MINUTES,
) -> TimeRange:
    """Order an anchor/hover pair and give it at least one slot of length.

    Dates order lexicographically; on a single day the minutes are ordered
    numerically as well. A single-day range that would run past 24:00 is
    pulled back so it still covers one slot.
    """
    order = compare_date_key(anchor_date_key, hover_date_key)
    if order == 0:
        start_minutes, end_minutes = sorted((clamp_minutes(anchor_minutes), clamp_minutes(hover_minutes)))
        start_minutes = min(start_minutes, max(0, MINUTES_IN_DAY - slot_minutes))
        end_minutes = min(MINUTES_IN_DAY, max(start_minutes + slot_minutes, end_minutes))
        return TimeRange(anchor_date_key, hover_date_key, start_minutes, end_minutes)

    if order < 0:
        start_key, start_minutes, end_key, end_minutes = anchor_date_key, anchor_minutes, hover_date_key, hover_minutes
    else:
        start_key, start_minutes, end_key, end_minutes = hover_date_key, hover_minutes, anchor_date_key, anchor_minutes
    total = diff_in_days(start_key, end_key) * MINUTES_IN_DAY + end_minutes - start_minutes
    if total < slot_minutes:
        end_total = start_minutes + slot_minutes
        end_key = add_days(start_key, end_total // MINUTES_IN_DAY)
        end_minutes = end_total % MINUTES_IN_DAY
    return TimeRange(start_key, end_key, start_minutes, end_minutes)


def derive_gesture_range(gesture: Gesture) -> Optional[Union[TimeRange, DateRange]]:
    """Preview range for whatever gesture is in progress.

    Gestures without minutes belong to the all-day grid and give a
    ``DateRange``; time-grid gestures give a ``TimeRange``.
    """
    if isinstance(gesture, DragGesture):
        if gesture.hover_minutes is None:
            return derive_drag_range(gesture.segment, gesture.hover_date_key)
        return derive_timed_drag_range(gesture.segment, gesture.hover_date_key, gesture.hover_minutes)
    if isinstance(gesture, ResizeGesture):
        if gesture.hover_minutes is None:
            return derive_resize_range(gesture.segment, gesture.hover_date_key)
        return derive_timed_resize_range(gesture.segment, gesture.hover_date_key, gesture.hover_minutes)
    if isinstance(gesture, SelectGesture):
        if gesture.anchor_minutes is None or gesture.hover_minutes is None:
            return normalize_date_selection(gesture.anchor_date_key, gesture.hover_date_key)
        return normalize_time_selection(
            gesture.anchor_date_key, gesture.anchor_minutes, gesture.hover_date_key, gesture.hover_minutes
        )
    return None


# ------------------------------------------------------------------
# Commits
# ------------------------------------------------------------------

def can_move_event(event: CalendarEvent) -> bool:
    return bool(event.date)


def shift_event_dates(event: CalendarEvent, offset_days: int) -> CalendarEvent:
    """Move the event's date (and end date, if any) by *offset_days*."""
    if not event.date:
        return event
    end_date = add_days(event.end_date, offset_days) if event.end_date else event.end_date
    return replace(event, date=add_days(event.date, offset_days), end_date=end_date)


def commit_all_day_move(segment: EventSegment, drop_date_key: str) -> Optional[CalendarEvent]:
    """Event moved so it starts on *drop_date_key*, or None if it can't move."""
    if not can_move_event(segment.event):
        logger.debug("Ignoring drop of undated event %r", segment.event)
        return None
    return shift_event_dates(segment.event, diff_in_days(_base_start(segment), drop_date_key))


def commit_all_day_resize(segment: EventSegment, hover_date_key: str) -> CalendarEvent:
    resized = derive_resize_range(segment, hover_date_key)
    end_date = None if resized.end == resized.start else resized.end
    return replace(segment.event, end_date=end_date)


def _storable(date_key: str, minutes: int) -> tuple[str, str]:
    """(date key, HH:MM) for a stored time; 24:00 becomes 00:00 the next day."""
    minutes = clamp_minutes(minutes)
    if minutes == MINUTES_IN_DAY:
        return add_days(date_key, 1), format_time(0)
    return date_key, format_time(minutes)


def _stored_range(start_key: str, start_minutes: int, end_key: str, end_minutes: int) -> dict:
    date, start_time = _storable(start_key, start_minutes)
    end_date, end_time = _storable(end_key, end_minutes)
    if compare_date_key(end_date, date) <= 0:
        end_date = None
    return {"date": date, "end_date": end_date, "start_time": start_time, "end_time": end_time}


def commit_timed_move(segment: EventSegment, hover_date_key: str, hover_minutes: int) -> Optional[CalendarEvent]:
    if not can_move_event(segment.event):
        logger.debug("Ignoring drop of undated event %r", segment.event)
        return None
    shifted = derive_timed_drag_range(segment, hover_date_key, hover_minutes)
    return replace(
        segment.event,
        all_day=False,
        **_stored_range(shifted.start_date_key, shifted.start_minutes, shifted.end_date_key, shifted.end_minutes),
    )


def commit_timed_resize(segment: EventSegment, hover_date_key: str, hover_minutes: Optional[int]) -> CalendarEvent:
    resized = derive_timed_resize_range(segment, hover_date_key, hover_minutes)
    stored = _stored_range(resized.start_date_key, resized.start_minutes, resized.end_date_key, resized.end_minutes)
    return replace(
        segment.event,
        end_date=stored["end_date"],
        start_time=segment.event.start_time or stored["start_time"],
        end_time=stored["end_time"],
    )


def commit_time_selection(selection: TimeRange, title: str = "") -> CalendarEvent:
    """Draft of a new timed event covering a finished time selection."""
    return CalendarEvent(
        title=title,
        all_day=False,
        creator="calendar",
        **_stored_range(
            selection.start_date_key, selection.start_minutes, selection.end_date_key, selection.end_minutes
        ),
    )


def commit_date_selection(selection: DateRange, title: str = "") -> CalendarEvent:
    """Draft of a new all-day event covering a finished date selection."""
    return CalendarEvent(
        title=title,
        date=selection.start,
        end_date=None if selection.start == selection.end else selection.end,
        all_day=True,
        creator="calendar",
    )
