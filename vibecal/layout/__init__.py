"""Layout engine: grids, segments, row stacking, timed columns and gestures."""

from vibecal.layout.agenda import AgendaDay, build_agenda
from vibecal.layout.grid import build_month_grid, build_week_grid, is_today
from vibecal.layout.interaction import get_shifted_timed_range, normalize_time_selection
from vibecal.layout.segments import build_event_rows
from vibecal.layout.stacking import get_week_event_layout, more_menu_segments
from vibecal.layout.timed import assign_columns, build_timed_day_entries

__all__ = [
    "AgendaDay",
    "assign_columns",
    "build_agenda",
    "build_event_rows",
    "build_month_grid",
    "build_timed_day_entries",
    "build_week_grid",
    "get_shifted_timed_range",
    "get_week_event_layout",
    "is_today",
    "more_menu_segments",
    "normalize_time_selection",
]
