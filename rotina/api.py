"""rotina.api

Stable *library* entrypoint for ROTINA.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from rotina.calendar_grid import (
    InvalidReferenceDate,
    MonthCursor,
    build_month_grid,
    parse_event_start,
)
from rotina.config import Settings, load_settings, save_settings
from rotina.events import load_timed_events
from rotina.model import DayCell, MonthGrid, ParsedStart, TimedEvent, WeekStart
from rotina.pomodoro import Pomodoro
from rotina.render import build_calendar_html
from rotina.store import DATA_KEYS, RecordStore
from rotina.util.console import eprint, obs_enabled
from rotina.util.tz import Clock
from rotina.validate import RecordValidationError
from rotina.view import render_month_grid


def month_grid_from_store(
    store: RecordStore,
    cursor: MonthCursor,
    week_starts_on: WeekStart,
    *,
    now: Clock,
    tz: Optional[dt.tzinfo] = None,
) -> MonthGrid:
    """Build the grid for `cursor` from the stored events.

    Dropped events are reported on stderr when ROTINA_OBS_LOG is on.
    """
    grid = build_month_grid(cursor.first_day, load_timed_events(store), week_starts_on, now=now, tz=tz)
    if grid.dropped_event_count and obs_enabled():
        ids = ", ".join(repr(i) for i in grid.dropped_event_ids)
        eprint(
            f"[rotina.calendar] WARN: {grid.dropped_event_count} event(s) with invalid start "
            f"left out of {cursor.key()}: {ids}"
        )
    return grid


__all__ = [
    "DATA_KEYS",
    "DayCell",
    "InvalidReferenceDate",
    "MonthCursor",
    "MonthGrid",
    "ParsedStart",
    "Pomodoro",
    "RecordStore",
    "RecordValidationError",
    "Settings",
    "TimedEvent",
    "WeekStart",
    "build_calendar_html",
    "build_month_grid",
    "load_settings",
    "month_grid_from_store",
    "parse_event_start",
    "render_month_grid",
    "save_settings",
]
