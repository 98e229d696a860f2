"""Command-line interface for vibecal."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import click

from vibecal.config import EVENT_ROW_SPACING, GRID_TOP_OFFSET, CalendarSettings, load_settings
from vibecal.layout.agenda import build_agenda
from vibecal.layout.dates import MINUTES_IN_DAY, parse_date_key, to_minutes
from vibecal.layout.grid import (
    MONTH_GRID_DAYS,
    WEEK_DAYS,
    build_month_grid,
    build_week_grid,
    get_grid_row_capacity,
    get_row_capacity,
    get_week_bounds,
)
from vibecal.layout.interaction import (
    GridRect,
    commit_all_day_move,
    commit_timed_move,
    get_minutes_from_pointer,
    snap_minutes,
)
from vibecal.layout.segments import build_event_id, build_event_rows, clip_segments, flatten_rows
from vibecal.layout.stacking import get_week_event_layout
from vibecal.layout.timed import build_timed_day_entries, build_timed_week
from vibecal.renderer import render_agenda, render_month, render_timed_days, render_week_layout, to_json
from vibecal.store import EventSourceError, EventStore, fetch_entries

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(format=LOG_FORMAT, level=level)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _load_entries(ctx: click.Context) -> list:
    source = ctx.obj["source"]
    try:
        if source:
            return fetch_entries(source)
        return ctx.obj["store"].load_entries()
    except EventSourceError as exc:
        raise click.ClickException(str(exc)) from exc


def _settings(ctx: click.Context) -> CalendarSettings:
    return ctx.obj["settings"]


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option(
    "--data-dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory holding events.json (default: ./data).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="JSON settings file (default: ./vibecal.json).",
)
@click.option("--week-start", type=click.IntRange(0, 6), default=None, help="First weekday, 0 = Sunday.")
@click.option("--source", default=None, help="Read events from a JSON feed URL instead of the store.")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    data_dir: Path | None,
    config_path: Path | None,
    week_start: int | None,
    source: str | None,
) -> None:
    """Calendar layout engine: grids, stacking, timed columns."""
    _setup_logging(verbose)
    try:
        settings = load_settings(config_path).with_overrides(week_start=week_start)
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["store"] = EventStore(data_dir=data_dir or Path(settings.data_dir))
    ctx.obj["source"] = source


@cli.command()
@click.argument("year", type=int)
@click.argument("month", type=click.IntRange(1, 12))
@click.option("--rows", type=click.IntRange(min=0), default=None, help="Visible event rows per week.")
@click.option(
    "--height",
    type=click.FloatRange(min=0),
    default=None,
    help="Measured grid height in pixels; derives the visible rows.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the layouts as JSON.")
@click.pass_context
def month(
    ctx: click.Context,
    year: int,
    month: int,
    rows: int | None,
    height: float | None,
    as_json: bool,
) -> None:
    """Show the stacked month layout with "+N more" counts."""
    settings = _settings(ctx)
    capacity = settings.row_capacity
    if rows is not None:
        capacity = rows
    elif height is not None:
        measured = get_grid_row_capacity(height, MONTH_GRID_DAYS // WEEK_DAYS, GRID_TOP_OFFSET, EVENT_ROW_SPACING)
        capacity = get_row_capacity(measured)
        logger.debug("Grid height %.0fpx fits %d row(s), %d for events", height, measured, capacity)
    grid = build_month_grid(year, month, settings.week_start)
    event_rows = build_event_rows(_load_entries(ctx), grid)
    layouts = [get_week_event_layout(event_rows, *get_week_bounds(week), capacity) for week in range(6)]
    if as_json:
        click.echo(to_json(layouts))
        return
    click.echo(render_month(year, month, grid, layouts))


@cli.command()
@click.argument("day", type=DATE)
@click.option("--json", "as_json", is_flag=True, help="Print the layouts as JSON.")
@click.pass_context
def week(ctx: click.Context, day: datetime, as_json: bool) -> None:
    """Show all-day stacking and timed columns for the week containing DAY."""
    settings = _settings(ctx)
    grid = build_week_grid(day.date(), settings.week_start)
    event_rows = build_event_rows(_load_entries(ctx), grid)
    layout = get_week_event_layout(event_rows, 0, len(grid) - 1, settings.row_capacity)
    day_keys = [cell.key for cell in grid]
    timed = build_timed_week(flatten_rows(event_rows), day_keys)
    if as_json:
        click.echo(to_json({"all_day": layout, "timed": timed}))
        return
    click.echo(f"# Week of {grid[0].key}\n")
    click.echo(render_week_layout(layout, grid))
    click.echo("")
    click.echo(render_timed_days(day_keys, timed))


@cli.command()
@click.argument("day", type=DATE)
@click.option("--json", "as_json", is_flag=True, help="Print the placements as JSON.")
@click.pass_context
def day(ctx: click.Context, day: datetime, as_json: bool) -> None:
    """Show timed columns for a single DAY."""
    grid = build_week_grid(day.date(), _settings(ctx).week_start)
    event_rows = build_event_rows(_load_entries(ctx), grid)
    day_key = day.date().isoformat()
    offset = next(i for i, cell in enumerate(grid) if cell.key == day_key)
    timed = [build_timed_day_entries(flatten_rows(event_rows), day_key, offset)]
    if as_json:
        click.echo(to_json(timed[0]))
        return
    click.echo(render_timed_days([day_key], timed))


@cli.command()
@click.argument("day", type=DATE)
@click.pass_context
def agenda(ctx: click.Context, day: datetime) -> None:
    """List the events of the week containing DAY, day by day."""
    grid = build_week_grid(day.date(), _settings(ctx).week_start)
    click.echo(render_agenda(build_agenda(build_event_rows(_load_entries(ctx), grid), grid)))


@cli.command()
@click.argument("event_id")
@click.argument("target", type=DATE)
@click.option("--time", "start_time", default=None, help="New start time (HH:MM), snapped to the slot size.")
@click.option(
    "--y",
    "drop_y",
    type=float,
    default=None,
    help="Drop position on the time grid, in pixels from the top.",
)
@click.pass_context
def move(
    ctx: click.Context,
    event_id: str,
    target: datetime,
    start_time: str | None,
    drop_y: float | None,
) -> None:
    """Move EVENT_ID so it starts on TARGET, keeping its length.

    With --time or --y the event lands on the time grid; otherwise it is
    moved as an all-day drop.
    """
    settings = _settings(ctx)
    if start_time is not None and drop_y is not None:
        raise click.UsageError("Use either --time or --y, not both.")
    if ctx.obj["source"]:
        raise click.ClickException("Cannot move events in a remote feed.")
    store: EventStore = ctx.obj["store"]
    entries = _load_entries(ctx)
    match = next(
        ((event, location) for i, (event, location) in enumerate(entries) if build_event_id(event, i) == event_id),
        None,
    )
    if match is None:
        raise click.ClickException(f"No event with id {event_id!r}.")
    original, location = match
    try:
        anchor = parse_date_key(original.date or "")
    except ValueError:
        raise click.ClickException(f"Event {event_id!r} has no valid date and cannot be moved.") from None

    grid = build_week_grid(anchor, settings.week_start)
    segment = next((s for s in clip_segments(entries, grid) if s.id == event_id), None)
    if segment is None:
        raise click.ClickException(f"Event {event_id!r} has an invalid date range and cannot be moved.")
    target_key = target.date().isoformat()

    minutes = None
    if start_time is not None:
        minutes = to_minutes(start_time)
        if minutes is None:
            raise click.BadParameter(f"{start_time!r} is not a HH:MM time.", param_hint="--time")
    elif drop_y is not None:
        rect = GridRect(left=0, top=0, width=0, height=MINUTES_IN_DAY / settings.slot_minutes * settings.slot_height)
        minutes = get_minutes_from_pointer(drop_y, rect, settings.slot_height, settings.slot_minutes)

    if minutes is not None:
        updated = commit_timed_move(segment, target_key, snap_minutes(minutes, settings.slot_minutes))
    else:
        updated = commit_all_day_move(segment, target_key)
    if updated is None:
        raise click.ClickException(f"Event {event_id!r} cannot be moved.")

    store.replace_event(location, replace(updated, id=original.id))
    when = f" {updated.start_time}" if minutes is not None else ""
    click.echo(f"Moved {original.title!r} to {updated.date}{when}")


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show store statistics."""
    store: EventStore = ctx.obj["store"]
    try:
        s = store.stats()
    except EventSourceError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Events:  {s['events']}")
    click.echo(f"Timed:   {s['timed']}")
    click.echo(f"Undated: {s['undated']}")
