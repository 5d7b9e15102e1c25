# rotina/model.py
from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple


class WeekStart(enum.Enum):
    SUNDAY = "sunday"
    MONDAY = "monday"

    @property
    def first_weekday(self) -> int:
        # date.weekday(): Monday=0 .. Sunday=6
        return 6 if self is WeekStart.SUNDAY else 0

    @property
    def last_weekday(self) -> int:
        return (self.first_weekday + 6) % 7

    @classmethod
    def parse(cls, s: object) -> "WeekStart":
        if isinstance(s, WeekStart):
            return s
        low = str(s or "").strip().lower()
        for ws in cls:
            if low in (ws.value, ws.value[:3]):
                return ws
        raise ValueError(f"Invalid week start: {s!r} (expected sunday|monday)")


@dataclass(frozen=True)
class TimedEvent:
    id: Any
    title: str
    start: Any
    end: Any = None
    location: Optional[str] = None
    reminders: Tuple[str, ...] = ()
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "TimedEvent":
        reminders = rec.get("reminders") or []
        if not isinstance(reminders, list):
            reminders = []
        location = rec.get("location")
        return cls(
            id=rec.get("id"),
            title=str(rec.get("title") or ""),
            start=rec.get("start"),
            end=rec.get("end"),
            location=str(location) if location else None,
            reminders=tuple(str(x) for x in reminders),
            created_at=rec.get("created_at"),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "location": self.location,
            "start": self.start,
            "end": self.end,
            "reminders": list(self.reminders),
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class ParsedStart:
    """Outcome of parsing an event start: either a wall-clock datetime or the raw value."""

    ok: bool
    value: Optional[dt.datetime]
    raw: Any


@dataclass(frozen=True)
class DayCell:
    calendar_date: dt.date
    is_in_reference_month: bool
    is_today: bool
    events: Tuple[TimedEvent, ...] = ()


@dataclass(frozen=True)
class MonthGrid:
    year: int
    month: int
    week_starts_on: WeekStart
    cells: Tuple[DayCell, ...]
    dropped_event_count: int = 0
    dropped_event_ids: Tuple[Any, ...] = field(default=())

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[DayCell]:
        return iter(self.cells)

    def __getitem__(self, i: int) -> DayCell:
        return self.cells[i]

    @property
    def first_date(self) -> dt.date:
        return self.cells[0].calendar_date

    @property
    def last_date(self) -> dt.date:
        return self.cells[-1].calendar_date

    def weeks(self) -> List[Tuple[DayCell, ...]]:
        return [self.cells[i:i + 7] for i in range(0, len(self.cells), 7)]

    def cell_for(self, d: dt.date) -> Optional[DayCell]:
        if not self.cells or d < self.first_date or d > self.last_date:
            return None
        return self.cells[(d - self.first_date).days]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "week_starts_on": self.week_starts_on.value,
            "dropped_event_count": self.dropped_event_count,
            "cells": [
                {
                    "date": c.calendar_date.isoformat(),
                    "in_month": c.is_in_reference_month,
                    "today": c.is_today,
                    "events": [e.to_record() for e in c.events],
                }
                for c in self.cells
            ],
        }


# Stored record shapes (plain dicts, as persisted)
Record = Dict[str, Any]


__all__ = [
    "WeekStart",
    "TimedEvent",
    "ParsedStart",
    "DayCell",
    "MonthGrid",
    "Record",
]
