"""Month and week day grids."""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Optional, Sequence, TypeVar

from vibecal.layout.dates import format_date_key
from vibecal.models import DayCell

MONTH_GRID_DAYS = 42  # 6 weeks x 7 days
WEEK_DAYS = 7

T = TypeVar("T")


def _weekday_sunday_first(value: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6."""
    return (value.weekday() + 1) % 7


def _grid_start(anchor: date, week_start: int) -> date:
    offset = (_weekday_sunday_first(anchor) - week_start + 7) % 7
    return anchor - timedelta(days=offset)


def build_month_grid(year: int, month: int, week_start: int = 0) -> list[DayCell]:
    """Return the 42 day cells covering *month*, starting on *week_start*.

    *month* is 1-based; *week_start* uses Sunday = 0.
    """
    first = date(year, month, 1)
    start = _grid_start(first, week_start)
    cells: list[DayCell] = []
    for i in range(MONTH_GRID_DAYS):
        day = start + timedelta(days=i)
        cells.append(DayCell(key=format_date_key(day), in_month=day.month == month))
    return cells


def build_week_grid(anchor: date, week_start: int = 0) -> list[DayCell]:
    """Return the 7 day cells of the week containing *anchor*."""
    start = _grid_start(anchor, week_start)
    cells: list[DayCell] = []
    for i in range(WEEK_DAYS):
        day = start + timedelta(days=i)
        cells.append(DayCell(key=format_date_key(day), in_month=day.month == anchor.month))
    return cells


def is_today(value: date, today: Optional[date] = None) -> bool:
    return value == (today or date.today())


def index_by_date_key(grid: Sequence[DayCell]) -> dict[str, int]:
    return {cell.key: index for index, cell in enumerate(grid)}


def get_week_bounds(week_index: int) -> tuple[int, int]:
    """Grid indices (start, end) of the *week_index*-th row of a month grid."""
    week_start_index = week_index * WEEK_DAYS
    return week_start_index, week_start_index + WEEK_DAYS - 1


def get_week_cells(cells: Sequence[T], week_start_index: int, week_length: int = WEEK_DAYS) -> list[T]:
    return list(cells[week_start_index:week_start_index + week_length])


# ------------------------------------------------------------------
# Row capacity
# ------------------------------------------------------------------

def get_grid_row_capacity(
    grid_height: Optional[float],
    row_count: int,
    top_offset: float,
    row_spacing: float,
) -> int:
    """How many event rows fit in one week row of a measured grid.

    A missing or zero height means nothing has been measured yet.
    """
    if not grid_height or row_count <= 0 or row_spacing <= 0:
        return 0
    row_height = grid_height / row_count
    available = math.floor((row_height - top_offset) / row_spacing)
    return max(0, available)


def get_row_capacity(grid_row_capacity: int) -> int:
    """Rows usable by events once one is reserved for the "+N more" line."""
    return max(0, grid_row_capacity - 1)
