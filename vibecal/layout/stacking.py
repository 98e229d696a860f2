"""Per-week row stacking with "+N more" overflow accounting."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, replace
from typing import Optional

from vibecal.layout.dates import to_minutes
from vibecal.layout.grid import WEEK_DAYS
from vibecal.layout.segments import EventRows, flatten_rows
from vibecal.models import EventSegment, WeekEventLayout, WeekPlacement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionSpan:
    """A selected grid range expressed inside one week (1-based column)."""

    column_start: int
    span: int


def _clamp_to_week(start: int, end: int, week_start: int, week_end: int) -> tuple[int, int]:
    return max(start, week_start), min(end, week_end)


def week_order_key(segment: EventSegment) -> tuple:
    """Order in which a week's segments claim rows.

    Earlier true start, longer span, earlier start time (untimed last),
    then title. Python's sort is stable, so exact ties keep the order of
    the priority rows they came from.
    """
    minutes = to_minutes(segment.event.start_time)
    return (
        segment.start_index,
        -segment.span,
        minutes is None,
        minutes or 0,
        (segment.event.title or "").lower(),
    )


def _find_row(occupancy: list[list[tuple[int, int]]], start: int, end: int) -> int:
    for row_index, row in enumerate(occupancy):
        if all(end < taken_start or start > taken_end for taken_start, taken_end in row):
            return row_index
    return len(occupancy)


def get_week_event_layout(
    rows: EventRows,
    week_start_index: int,
    week_end_index: int,
    row_capacity: int,
) -> WeekEventLayout:
    """Stack the segments touching one week into at most *row_capacity* rows.

    Segments that land on a row at or past the capacity are not placed;
    each weekday they cover bumps ``hidden_counts_by_day`` by one instead.
    ``week_row_count`` counts every row opened, hidden ones included.
    """
    hidden_counts = [0] * WEEK_DAYS
    if row_capacity <= 0:
        return WeekEventLayout(
            row_capacity=row_capacity,
            week_row_count=0,
            multi_day_placements=[],
            single_day_placements=[],
            hidden_counts_by_day=hidden_counts,
        )

    in_week = [
        segment
        for segment in flatten_rows(rows)
        if not (segment.end_index < week_start_index or segment.start_index > week_end_index)
    ]
    in_week.sort(key=week_order_key)

    occupancy: list[list[tuple[int, int]]] = []
    multi_day: list[WeekPlacement] = []
    single_day: list[WeekPlacement] = []
    hidden_total = 0

    for segment in in_week:
        clamped_start, clamped_end = _clamp_to_week(
            segment.start_index, segment.end_index, week_start_index, week_end_index
        )
        row_index = _find_row(occupancy, clamped_start, clamped_end)
        if row_index == len(occupancy):
            occupancy.append([])
        occupancy[row_index].append((clamped_start, clamped_end))

        if row_index >= row_capacity:
            for index in range(clamped_start, clamped_end + 1):
                hidden_counts[index - week_start_index] += 1
            hidden_total += 1
            continue

        is_actual_start = segment.start_index == clamped_start
        is_actual_end = segment.end_index == clamped_end
        placement = WeekPlacement(
            segment=segment,
            week_row=row_index,
            column_start=clamped_start - week_start_index + 1,
            span_in_week=clamped_end - clamped_start + 1,
            is_span_start=is_actual_start,
            is_span_end=is_actual_end,
            is_actual_end=is_actual_end,
        )
        if segment.span <= 1:
            single_day.append(
                replace(placement, day_offset=clamped_start - week_start_index, cell_index=clamped_start)
            )
        else:
            multi_day.append(placement)

    if hidden_total:
        logger.debug(
            "Week %d-%d: %d segment(s) hidden past capacity %d",
            week_start_index, week_end_index, hidden_total, row_capacity,
        )

    return WeekEventLayout(
        row_capacity=row_capacity,
        week_row_count=len(occupancy),
        multi_day_placements=multi_day,
        single_day_placements=single_day,
        hidden_counts_by_day=hidden_counts,
    )


def get_selection_span_for_week(
    selection: Optional[tuple[int, int]],
    week_start_index: int,
    week_end_index: int,
) -> Optional[SelectionSpan]:
    """Clip a selected ``(start_index, end_index)`` grid range to one week."""
    if selection is None:
        return None
    clamped_start, clamped_end = _clamp_to_week(
        selection[0], selection[1], week_start_index, week_end_index
    )
    if clamped_start > clamped_end:
        return None
    return SelectionSpan(column_start=clamped_start - week_start_index + 1, span=clamped_end - clamped_start + 1)


def _more_menu_key(placement: WeekPlacement) -> tuple:
    start_time = placement.segment.event.start_time
    return (
        placement.week_row,
        placement.column_start,
        -placement.span_in_week,
        not start_time,
        start_time or "",
        (placement.segment.event.title or "").lower(),
    )


def more_menu_segments(rows: EventRows, date_index: int) -> list[EventSegment]:
    """Everything on the grid day *date_index*, for the "+N more" popover.

    The day's week is re-stacked without a capacity limit so the popover
    lists events in the same vertical order as the grid.
    """
    week_start_index = (date_index // WEEK_DAYS) * WEEK_DAYS
    week_end_index = week_start_index + WEEK_DAYS - 1
    layout = get_week_event_layout(rows, week_start_index, week_end_index, sys.maxsize)
    day_offset = date_index - week_start_index

    def covers_day(placement: WeekPlacement) -> bool:
        start_offset = placement.column_start - 1
        end_offset = min(WEEK_DAYS - 1, start_offset + placement.span_in_week - 1)
        return start_offset <= day_offset <= end_offset

    ordered = sorted(filter(covers_day, layout.placements), key=_more_menu_key)
    return [placement.segment for placement in ordered]
