# rotina/render/inline.py
from __future__ import annotations

import datetime as dt
import html
from typing import List, Optional

import orjson

from ..calendar_grid import MonthCursor
from ..model import DayCell, MonthGrid
from ..view import MAX_EVENTS_PER_DAY, format_time, weekday_header
from .css import CSS_BLOCK
from .html_shell import HTML_SHELL

_DATA_MARKER = "__DATA_JSON__"
_DATA_MARKER_COUNT = HTML_SHELL.count(_DATA_MARKER)
_BODY_MARKER = "__BODY_MARKUP__"


def _cell_markup(c: DayCell, tz: Optional[dt.tzinfo]) -> str:
    classes = ["day"]
    if c.is_today:
        classes.append("today")
    if not c.is_in_reference_month:
        classes.append("other-month")
    items: List[str] = []
    for ev in c.events[:MAX_EVENTS_PER_DAY]:
        when = format_time(ev.start, tz)
        items.append(
            f'<div class="event-item" title="{html.escape(ev.title)}">'
            f'<span class="event-dot"></span>{html.escape(when)} {html.escape(ev.title)}</div>'
        )
    extra = len(c.events) - MAX_EVENTS_PER_DAY
    if extra > 0:
        items.append(f'<div class="muted">+{extra} mais</div>')
    return (
        f'<td class="{" ".join(classes)}" data-date="{c.calendar_date.isoformat()}">'
        f'<div class="day-number">{c.calendar_date.day}</div>'
        f'<div class="day-events">{"".join(items)}</div></td>'
    )


def _body_markup(grid: MonthGrid, label: str, tz: Optional[dt.tzinfo]) -> str:
    head = "".join(f"<th>{h}</th>" for h in weekday_header(grid.week_starts_on))
    rows = "".join(
        "<tr>" + "".join(_cell_markup(c, tz) for c in week) + "</tr>" for week in grid.weeks()
    )
    dropped = ""
    if grid.dropped_event_count:
        dropped = f"<small>{grid.dropped_event_count} com data inválida</small>"
    return (
        '<section class="card">'
        f'<div class="card-h"><div id="calLabel">{html.escape(label)}</div>{dropped}</div>'
        f'<table class="calendar" id="calendar"><thead><tr>{head}</tr></thead>'
        f"<tbody>{rows}</tbody></table>"
        "</section>"
    )


def build_calendar_html(grid: MonthGrid, tz: Optional[dt.tzinfo] = None) -> str:
    """Standalone HTML page for `grid`.

    Pass the `tz` the grid was built with so event times match the day
    they are filed under.
    """
    # Template must contain the data placeholder exactly once, and the
    # generated page must not contain it after injection.
    if not isinstance(grid, MonthGrid):
        raise TypeError(f"grid must be MonthGrid, got {type(grid).__name__}")

    if _DATA_MARKER_COUNT != 1 or HTML_SHELL.count(_BODY_MARKER) != 1:
        raise RuntimeError(f"HTML_SHELL must contain {_DATA_MARKER} and {_BODY_MARKER} exactly once")

    label = MonthCursor(grid.year, grid.month).label()
    data_json = orjson.dumps(grid.to_dict()).decode("utf-8")
    data_json = data_json.replace("</", r"<\/")  # script-safe injection

    shell = HTML_SHELL.replace("__TITLE__", html.escape(f"Minha Rotina • {label}")).replace(
        "__CSS_BLOCK__", CSS_BLOCK
    )
    # Split rather than replace so record text can never be read as a marker.
    head, rest = shell.split(_BODY_MARKER)
    middle, tail = rest.split(_DATA_MARKER)

    if _DATA_MARKER in head + middle + tail or _BODY_MARKER in head + middle + tail:
        raise RuntimeError("HTML generation failed: marker still present after injection")

    return head + _body_markup(grid, label, tz) + middle + data_json + tail
