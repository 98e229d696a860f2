"""Calendar data model and the derived layout records."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Optional, Union

# Host-format keys that differ from the Python attribute names.
_CAMEL_KEYS = {
    "end_date": "endDate",
    "all_day": "allDay",
    "start_time": "startTime",
    "end_time": "endTime",
    "task_event": "taskEvent",
    "days_of_week": "daysOfWeek",
    "start_recur": "startRecur",
    "end_recur": "endRecur",
    "start_date": "startDate",
    "skip_dates": "skipDates",
}
_SNAKE_KEYS = {camel: snake for snake, camel in _CAMEL_KEYS.items()}


@dataclass(frozen=True)
class CalendarEvent:
    """A single calendar event as supplied by the storage layer."""

    title: str
    date: Optional[str] = None  # ISO date key: "2026-03-15"
    end_date: Optional[str] = None  # inclusive last day for multi-day events
    all_day: bool = False
    start_time: Optional[str] = None  # 24-hr time: "19:30"
    end_time: Optional[str] = None
    color: Optional[str] = None
    id: Optional[str] = None
    task_event: bool = False
    completed: bool = False
    creator: Optional[str] = None  # "kanban", "calendar" or "timeline"
    # Recurrence fields are carried through untouched.
    days_of_week: list[str] = field(default_factory=list)
    start_recur: Optional[str] = None
    end_recur: Optional[str] = None
    start_date: Optional[str] = None
    rrule: Optional[str] = None
    skip_dates: list[str] = field(default_factory=list)

    @property
    def placeable(self) -> bool:
        """Whether the event has a date and can be put on a grid."""
        return bool(self.date)

    def to_dict(self) -> dict:
        """Serialize to a plain dict using the host's camelCase keys.

        Unset optional fields are left out.
        """
        data: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if value is None or value == []:
                continue
            data[_CAMEL_KEYS.get(key, key)] = value
        return data

    def merge_into(self, stored: dict) -> dict:
        """Return *stored* with this event's fields written over it.

        Keys that are not event fields are kept; event fields left unset
        here are removed.
        """
        known = {f.name for f in fields(self)}
        kept = {key: value for key, value in stored.items() if _SNAKE_KEYS.get(key, key) not in known}
        kept.update(self.to_dict())
        return kept

    @classmethod
    def from_dict(cls, data: dict) -> CalendarEvent:
        """Deserialize from a plain dict, accepting camelCase or snake_case keys.

        Unknown keys are dropped.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _SNAKE_KEYS.get(key, key)
            if name in known:
                kwargs[name] = value
        for flag in ("all_day", "task_event", "completed"):
            if flag in kwargs:
                kwargs[flag] = bool(kwargs[flag])
        for seq in ("days_of_week", "skip_dates"):
            if seq in kwargs:
                kwargs[seq] = list(kwargs[seq] or [])
        return cls(**kwargs)

    def __repr__(self) -> str:
        time_str = f" {self.start_time}" if self.start_time else ""
        end_str = f"..{self.end_date}" if self.end_date and self.end_date != self.date else ""
        return f"<CalendarEvent '{self.title}' on {self.date or '?'}{end_str}{time_str}>"


@dataclass(frozen=True)
class EventLocation:
    """Opaque handle pointing back at where an event is stored."""

    path: str
    line_number: Optional[int] = None


# ------------------------------------------------------------------
# Grid and layout records
# ------------------------------------------------------------------

@dataclass(frozen=True)
class DayCell:
    """One day of a month or week grid."""

    key: str  # ISO date key
    in_month: bool


@dataclass(frozen=True)
class EventSegment:
    """An event clipped to the bounds of the visible grid."""

    id: str
    event: CalendarEvent
    location: Any
    start: str
    end: str
    span: int
    start_index: int
    end_index: int


@dataclass(frozen=True)
class WeekPlacement:
    """Where a segment sits inside one week row of the grid.

    ``column_start`` is 1-based. ``day_offset``/``cell_index`` are only set
    for single-day placements.
    """

    segment: EventSegment
    week_row: int
    column_start: int
    span_in_week: int
    is_span_start: bool
    is_span_end: bool
    is_actual_end: bool
    day_offset: Optional[int] = None
    cell_index: Optional[int] = None

    @property
    def is_single_day(self) -> bool:
        return self.day_offset is not None


@dataclass(frozen=True)
class WeekEventLayout:
    """Stacked placements for a single week window."""

    row_capacity: int
    week_row_count: int
    multi_day_placements: list[WeekPlacement]
    single_day_placements: list[WeekPlacement]
    hidden_counts_by_day: list[int]

    @property
    def placements(self) -> list[WeekPlacement]:
        return [*self.multi_day_placements, *self.single_day_placements]


@dataclass
class TimedEventPlacement:
    """A timed block on one day's minute axis, with its display column."""

    segment: EventSegment
    day_offset: int
    start_minutes: int
    end_minutes: int
    column: int = 0
    column_count: int = 1


@dataclass(frozen=True)
class TimeRange:
    """Normalized range used by drag, resize and selection previews."""

    start_date_key: str
    end_date_key: str
    start_minutes: int
    end_minutes: int


@dataclass(frozen=True)
class DateRange:
    """Inclusive all-day date range."""

    start: str
    end: str


# ------------------------------------------------------------------
# Gestures
# ------------------------------------------------------------------
#
# Exactly one gesture can be in progress. ``hover_minutes`` is None for
# gestures on the all-day/month grid and set for gestures on a time grid.

@dataclass(frozen=True)
class NoGesture:
    pass


@dataclass(frozen=True)
class DragGesture:
    segment: EventSegment
    hover_date_key: str
    hover_minutes: Optional[int] = None


@dataclass(frozen=True)
class ResizeGesture:
    segment: EventSegment
    hover_date_key: str
    hover_minutes: Optional[int] = None


@dataclass(frozen=True)
class SelectGesture:
    anchor_date_key: str
    hover_date_key: str
    anchor_minutes: Optional[int] = None
    hover_minutes: Optional[int] = None


Gesture = Union[NoGesture, DragGesture, ResizeGesture, SelectGesture]
