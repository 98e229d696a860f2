"""JSON-backed event store and remote event feeds."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import httpx

from vibecal.models import CalendarEvent, EventLocation

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("data")
EVENTS_FILE = "events.json"
FETCH_TIMEOUT = 20  # seconds

EventEntry = tuple[CalendarEvent, EventLocation]


class EventSourceError(Exception):
    """An event file or feed could not be read."""


def _parse_entries(raw: object, source: str) -> list[EventEntry]:
    """Turn a decoded JSON list into (event, location) pairs.

    Items that are not objects or have no title are skipped. The location
    records the item's position in the list so writes land in the right
    place.
    """
    if not isinstance(raw, list):
        raise EventSourceError(f"{source}: expected a JSON list of events")
    entries: list[EventEntry] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict) or not item.get("title"):
            logger.warning("%s: skipping malformed event at index %d", source, index)
            continue
        try:
            event = CalendarEvent.from_dict(item)
        except TypeError as exc:
            logger.warning("%s: skipping event at index %d (%s)", source, index, exc)
            continue
        entries.append((event, EventLocation(path=source, line_number=index)))
    return entries


class EventStore:
    """Stores calendar events in a JSON file.

    File layout:
        data/
            events.json   list of event objects in host (camelCase) format
    """

    def __init__(self, data_dir: Optional[Path] = None) -> None:
        self.data_dir = data_dir or DEFAULT_DATA_DIR
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._events_path = self.data_dir / EVENTS_FILE

    @property
    def path(self) -> Path:
        return self._events_path

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _load_raw(self) -> list:
        if not self._events_path.exists():
            return []
        try:
            with open(self._events_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise EventSourceError(f"{self._events_path}: invalid JSON ({exc})") from exc
        if not isinstance(raw, list):
            raise EventSourceError(f"{self._events_path}: expected a JSON list of events")
        return raw

    def _save_raw(self, raw: list) -> None:
        with open(self._events_path, "w", encoding="utf-8") as f:
            json.dump(raw, f, indent=2, ensure_ascii=False)
        logger.info("Wrote %s (%d items)", self._events_path, len(raw))

    def load_entries(self) -> list[EventEntry]:
        """Load every stored event with its location, in file order."""
        return _parse_entries(self._load_raw(), str(self._events_path))

    def load_events(self) -> list[CalendarEvent]:
        return [event for event, _location in self.load_entries()]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save_events(self, events: list[CalendarEvent]) -> None:
        """Persist events to disk in the given order."""
        self._save_raw([e.to_dict() for e in events])

    def replace_event(self, location: EventLocation, event: CalendarEvent) -> None:
        """Overwrite the event stored at *location*.

        Other items in the file, including ones the loader skips, are left
        as they are. Extra keys on the replaced item are kept.
        """
        raw = self._load_raw()
        index = location.line_number
        if location.path != str(self._events_path) or not 0 <= index < len(raw) or not isinstance(raw[index], dict):
            raise EventSourceError(f"No event stored at {location.path}:{location.line_number}")
        raw[index] = event.merge_into(raw[index])
        self._save_raw(raw)
        logger.info("Updated %r", event)

    def add_event(self, event: CalendarEvent) -> EventLocation:
        """Append a new event and return where it was stored."""
        raw = self._load_raw()
        raw.append(event.to_dict())
        self._save_raw(raw)
        return EventLocation(path=str(self._events_path), line_number=len(raw) - 1)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def stats(self) -> dict:
        """Return summary counts."""
        events = self.load_events()
        return {
            "events": len(events),
            "undated": sum(1 for e in events if not e.placeable),
            "timed": sum(1 for e in events if not e.all_day and e.start_time),
        }


# ------------------------------------------------------------------
# Remote feeds
# ------------------------------------------------------------------

def fetch_entries(url: str, client: Optional[httpx.Client] = None) -> list[EventEntry]:
    """Load events from a JSON feed at *url*.

    Raises:
        EventSourceError: on transport errors, HTTP 4xx/5xx, or bad JSON.
    """
    owns_client = client is None
    client = client or httpx.Client(timeout=FETCH_TIMEOUT, follow_redirects=True)
    try:
        logger.debug("Fetching %s", url)
        resp = client.get(url)
        if resp.status_code >= 400:
            logger.warning("Fetching %s failed (HTTP %d)", url, resp.status_code)
            raise EventSourceError(f"{url}: HTTP {resp.status_code}")
        try:
            raw = resp.json()
        except json.JSONDecodeError as exc:
            raise EventSourceError(f"{url}: invalid JSON ({exc})") from exc
    except httpx.HTTPError as exc:
        logger.warning("Fetching %s failed (%s)", url, exc)
        raise EventSourceError(f"{url}: {exc}") from exc
    finally:
        if owns_client:
            client.close()
    entries = _parse_entries(raw, url)
    logger.info("Fetched %d event(s) from %s", len(entries), url)
    return entries


# ------------------------------------------------------------------
# Optimistic updates
# ------------------------------------------------------------------

def apply_optimistic_move(
    entries: list[EventEntry],
    previous: EventEntry,
    next_event: CalendarEvent,
) -> list[EventEntry]:
    """Swap in *next_event* at the previous entry's location before the write lands."""
    _old, location = previous
    return [(next_event, loc) if loc == location else (event, loc) for event, loc in entries]


def rollback_optimistic_move(
    entries: list[EventEntry],
    previous: EventEntry,
    updated_location: EventLocation,
) -> list[EventEntry]:
    """Undo ``apply_optimistic_move`` after a failed write.

    If the write had already moved the event to *updated_location*, the
    previous location is restored too.
    """
    old_event, old_location = previous
    return [
        (old_event, old_location) if loc in (old_location, updated_location) else (event, loc)
        for event, loc in entries
    ]
