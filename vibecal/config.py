"""View settings."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

from vibecal.layout.dates import SLOT_MINUTES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("vibecal.json")

# Pixel metrics of the month grid, used to turn a measured height into a
# row capacity.
GRID_TOP_OFFSET = 36
EVENT_ROW_HEIGHT = 20
EVENT_ROW_GAP = 2
EVENT_ROW_SPACING = EVENT_ROW_HEIGHT + EVENT_ROW_GAP


@dataclass(frozen=True)
class CalendarSettings:
    """Settings for building and rendering calendar views."""

    week_start: int = 0  # 0 = Sunday ... 6 = Saturday
    slot_minutes: int = SLOT_MINUTES
    slot_height: int = 28  # pixels per slot on time grids
    row_capacity: int = 3  # visible event rows per week in text output
    data_dir: str = "data"

    def __post_init__(self) -> None:
        if not 0 <= self.week_start <= 6:
            raise ValueError(f"week_start must be between 0 and 6, got {self.week_start}")
        if self.slot_minutes <= 0:
            raise ValueError(f"slot_minutes must be positive, got {self.slot_minutes}")
        if self.slot_height <= 0:
            raise ValueError(f"slot_height must be positive, got {self.slot_height}")

    def to_dict(self) -> dict:
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> CalendarSettings:
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_settings(path: Optional[Path] = None) -> CalendarSettings:
    """Read settings from a JSON file, falling back to defaults.

    Unknown keys are ignored with a warning; invalid values raise ValueError.
    """
    path = path or DEFAULT_CONFIG_FILE
    if not path.exists():
        logger.debug("No settings file at %s, using defaults", path)
        return CalendarSettings()
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path}: invalid JSON ({exc})") from exc
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a JSON object")

    known = {f.name for f in fields(CalendarSettings)}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.warning("%s: ignoring unknown setting(s): %s", path, ", ".join(unknown))
    return CalendarSettings(**{k: v for k, v in raw.items() if k in known})
