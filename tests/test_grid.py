"""Tests for month/week grids and row capacity."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from vibecal.layout.dates import parse_date_key
from vibecal.layout.grid import (
    build_month_grid,
    build_week_grid,
    get_grid_row_capacity,
    get_row_capacity,
    get_week_bounds,
    get_week_cells,
    index_by_date_key,
    is_today,
)


def _consecutive(keys: list[str]) -> bool:
    days = [parse_date_key(k) for k in keys]
    return all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))


@pytest.mark.parametrize("week_start", range(7))
@pytest.mark.parametrize("year,month", [(2024, 2), (2026, 1), (2026, 2), (2026, 12), (2027, 8)])
def test_month_grid_always_has_42_consecutive_days(year: int, month: int, week_start: int) -> None:
    grid = build_month_grid(year, month, week_start)
    assert len(grid) == 42
    assert _consecutive([cell.key for cell in grid])
    first = parse_date_key(grid[0].key)
    assert (first.weekday() + 1) % 7 == week_start
    assert grid[0].key <= f"{year:04d}-{month:02d}-01"


def test_month_grid_sunday_start() -> None:
    grid = build_month_grid(2026, 2, 0)
    # 2026-02-01 is a Sunday, so the grid starts on it.
    assert grid[0].key == "2026-02-01"
    assert grid[-1].key == "2026-03-14"
    assert [cell.in_month for cell in grid[:28]] == [True] * 28
    assert not any(cell.in_month for cell in grid[28:])


def test_month_grid_monday_start_pads_previous_month() -> None:
    grid = build_month_grid(2026, 2, 1)
    assert grid[0].key == "2026-01-26"
    assert not grid[0].in_month
    assert grid[6].key == "2026-02-01"
    assert grid[6].in_month


@pytest.mark.parametrize("week_start", range(7))
def test_week_grid_has_7_days_containing_anchor(week_start: int) -> None:
    anchor = date(2026, 10, 17)
    grid = build_week_grid(anchor, week_start)
    keys = [cell.key for cell in grid]
    assert len(grid) == 7
    assert _consecutive(keys)
    assert anchor.isoformat() in keys


def test_week_grid_in_month_follows_anchor() -> None:
    grid = build_week_grid(date(2026, 3, 31), 0)
    assert [cell.key for cell in grid][:3] == ["2026-03-29", "2026-03-30", "2026-03-31"]
    assert [cell.in_month for cell in grid] == [True, True, True, False, False, False, False]


def test_week_grid_saturday_anchor() -> None:
    grid = build_week_grid(date(2026, 10, 17), 0)
    assert grid[0].key == "2026-10-11"
    assert grid[-1].key == "2026-10-17"
    grid = build_week_grid(date(2026, 10, 17), 1)
    assert grid[0].key == "2026-10-12"


def test_is_today() -> None:
    today = date(2026, 10, 17)
    assert is_today(date(2026, 10, 17), today=today)
    assert not is_today(date(2026, 10, 16), today=today)


def test_week_helpers() -> None:
    grid = build_month_grid(2026, 2, 0)
    assert get_week_bounds(0) == (0, 6)
    assert get_week_bounds(2) == (14, 20)
    week = get_week_cells(grid, 7)
    assert [cell.key for cell in week][0] == "2026-02-08"
    assert len(week) == 7
    assert index_by_date_key(grid)["2026-03-01"] == 28


def test_grid_row_capacity_from_measurement() -> None:
    # 600px / 6 weeks = 100px per week, minus a 36px header, 22px per row.
    assert get_grid_row_capacity(600, 6, 36, 22) == 2
    assert get_grid_row_capacity(None, 6, 36, 22) == 0
    assert get_grid_row_capacity(0, 6, 36, 22) == 0
    assert get_grid_row_capacity(120, 6, 36, 22) == 0


def test_row_capacity_reserves_overflow_row() -> None:
    assert get_row_capacity(3) == 2
    assert get_row_capacity(1) == 0
    assert get_row_capacity(0) == 0
