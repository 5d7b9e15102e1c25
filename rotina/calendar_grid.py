# rotina/calendar_grid.py
"""Month grid construction for the calendar view.

`build_month_grid` is a pure function: it reads the events it is given,
never mutates or keeps them, and reads the clock only through the injected
`now` callable.
"""

from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .model import DayCell, MonthGrid, ParsedStart, TimedEvent, WeekStart
from .util.timeparse import parse_month_yyyy_mm, parse_timestamp
from .util.tz import Clock, local_naive

_MONTHS_PT = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)


class InvalidReferenceDate(ValueError):
    """Raised when the reference date cannot be resolved to a year/month."""


def parse_event_start(raw: Any, tz: Optional[dt.tzinfo] = None) -> ParsedStart:
    ts = parse_timestamp(raw)
    if ts is None:
        return ParsedStart(ok=False, value=None, raw=raw)
    return ParsedStart(ok=True, value=local_naive(ts, tz), raw=raw)


def resolve_reference_month(reference_date: Any) -> Tuple[int, int]:
    if isinstance(reference_date, (dt.date, dt.datetime)):
        return reference_date.year, reference_date.month
    if isinstance(reference_date, str):
        s = reference_date.strip()
        try:
            if len(s) <= 7:
                return parse_month_yyyy_mm(s)
        except ValueError as ex:
            raise InvalidReferenceDate(f"Invalid reference date: {reference_date!r}") from ex
        ts = parse_timestamp(s)
        if ts is not None:
            return ts.year, ts.month
    raise InvalidReferenceDate(f"Invalid reference date: {reference_date!r}")


def grid_bounds(year: int, month: int, week_starts_on: WeekStart) -> Tuple[dt.date, dt.date]:
    first = dt.date(year, month, 1)
    last = dt.date(year, month, calendar.monthrange(year, month)[1])
    lead = (first.weekday() - week_starts_on.first_weekday) % 7
    trail = (week_starts_on.last_weekday - last.weekday()) % 7
    return first - dt.timedelta(days=lead), last + dt.timedelta(days=trail)


def build_month_grid(
    reference_date: Any,
    events: Sequence[TimedEvent],
    week_starts_on: WeekStart,
    *,
    now: Clock,
    tz: Optional[dt.tzinfo] = None,
) -> MonthGrid:
    """Build the full-week grid of day cells covering the reference month.

    Events are bucketed by the calendar date of their start (wall clock, or
    converted to `tz` when the timestamp carries an offset). Events whose
    start cannot be parsed are left out of every cell and reported through
    `dropped_event_count` / `dropped_event_ids`.
    """
    year, month = resolve_reference_month(reference_date)
    week_starts_on = WeekStart.parse(week_starts_on)
    try:
        start, end = grid_bounds(year, month, week_starts_on)
    except (OverflowError, ValueError) as ex:
        raise InvalidReferenceDate(f"Reference month out of range: {year:04d}-{month:02d}") from ex
    today = local_naive(now(), tz).date()

    buckets: Dict[dt.date, List[Tuple[dt.datetime, int, TimedEvent]]] = {}
    dropped: List[Any] = []
    for pos, ev in enumerate(events):
        parsed = parse_event_start(ev.start, tz)
        if not parsed.ok or parsed.value is None:
            dropped.append(ev.id)
            continue
        day = parsed.value.date()
        if start <= day <= end:
            buckets.setdefault(day, []).append((parsed.value, pos, ev))

    cells: List[DayCell] = []
    for offset in range((end - start).days + 1):
        d = start + dt.timedelta(days=offset)
        day_events = sorted(buckets.get(d, []), key=lambda x: (x[0], x[1]))
        cells.append(
            DayCell(
                calendar_date=d,
                is_in_reference_month=(d.year == year and d.month == month),
                is_today=(d == today),
                events=tuple(x[2] for x in day_events),
            )
        )

    return MonthGrid(
        year=year,
        month=month,
        week_starts_on=week_starts_on,
        cells=tuple(cells),
        dropped_event_count=len(dropped),
        dropped_event_ids=tuple(dropped),
    )


@dataclass(frozen=True)
class MonthCursor:
    """The month a calendar view is showing."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise InvalidReferenceDate(f"Invalid month: {self.month!r}")
        if not dt.MINYEAR <= self.year <= dt.MAXYEAR:
            raise InvalidReferenceDate(f"Year out of range: {self.year!r}")

    @classmethod
    def from_date(cls, reference_date: Any) -> "MonthCursor":
        year, month = resolve_reference_month(reference_date)
        return cls(year, month)

    @classmethod
    def today(cls, now: Clock, tz: Optional[dt.tzinfo] = None) -> "MonthCursor":
        return cls.from_date(local_naive(now(), tz).date())

    def shift(self, months: int) -> "MonthCursor":
        idx = self.year * 12 + (self.month - 1) + months
        return MonthCursor(idx // 12, idx % 12 + 1)

    def previous(self) -> "MonthCursor":
        return self.shift(-1)

    def next(self) -> "MonthCursor":
        return self.shift(1)

    @property
    def first_day(self) -> dt.date:
        return dt.date(self.year, self.month, 1)

    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def label(self) -> str:
        name = _MONTHS_PT[self.month - 1]
        return f"{name[0].upper()}{name[1:]} de {self.year}"


__all__ = [
    "InvalidReferenceDate",
    "MonthCursor",
    "build_month_grid",
    "grid_bounds",
    "parse_event_start",
    "resolve_reference_month",
]
