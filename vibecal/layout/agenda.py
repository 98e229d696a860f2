"""Day-by-day agenda for the list view."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from vibecal.layout.dates import is_timed_event, to_minutes
from vibecal.layout.segments import EventRows, flatten_rows
from vibecal.models import DayCell, EventSegment


@dataclass(frozen=True)
class AgendaDay:
    key: str
    all_day: list[EventSegment] = field(default_factory=list)
    timed: list[EventSegment] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.all_day and not self.timed


def _sort_minutes(segment: EventSegment) -> float:
    minutes = to_minutes(segment.event.start_time)
    return math.inf if minutes is None else minutes


def build_agenda(rows: EventRows, grid: Sequence[DayCell]) -> list[AgendaDay]:
    """Group the grid's segments by day.

    Anything that is not a proper timed event is listed as all-day, in row
    order; timed events follow, sorted by start time.
    """
    segments = flatten_rows(rows)
    days: list[AgendaDay] = []
    for cell in grid:
        on_day = [s for s in segments if s.start <= cell.key <= s.end]
        timed = sorted((s for s in on_day if is_timed_event(s.event)), key=_sort_minutes)
        all_day = [s for s in on_day if not is_timed_event(s.event)]
        days.append(AgendaDay(key=cell.key, all_day=all_day, timed=timed))
    return days
