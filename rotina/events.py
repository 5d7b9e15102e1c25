# rotina/events.py
from __future__ import annotations

import datetime as dt
from typing import Any, List, Optional

from .collection import Record, append_record, delete_record, find_record, iso_now, records, wall_clock
from .model import TimedEvent
from .store import DATA_KEYS, RecordStore
from .util.timeparse import parse_csv_list
from .util.tz import Clock, local_naive
from .validate import next_record_id, optional_text, require_text

KEY = DATA_KEYS["EVENTS"]


def add_event(
    store: RecordStore,
    *,
    title: str,
    start: str,
    now: Clock,
    end: Optional[str] = None,
    location: Optional[str] = None,
    reminders: Optional[str] = None,
) -> Record:
    at = now()
    event = {
        "id": next_record_id(records(store, KEY), at),
        "title": require_text(title, "title"),
        "location": optional_text(location),
        "start": require_text(start, "start"),
        "end": optional_text(end),
        "reminders": parse_csv_list(reminders),
        "created_at": iso_now(at),
    }
    return append_record(store, KEY, event)


def delete_event(store: RecordStore, event_id: Any) -> bool:
    return delete_record(store, KEY, event_id)


def get_event(store: RecordStore, event_id: Any) -> Optional[Record]:
    return find_record(store, KEY, event_id)


def load_timed_events(store: RecordStore) -> List[TimedEvent]:
    return [TimedEvent.from_record(r) for r in records(store, KEY)]


def events_on_day(store: RecordStore, day: dt.date, *, tz: Optional[dt.tzinfo] = None) -> List[Record]:
    out = []
    for e in records(store, KEY):
        start = wall_clock(e.get("start"), tz)
        if start is not None and start.date() == day:
            out.append(e)
    return out


def today_events(store: RecordStore, *, now: Clock, tz: Optional[dt.tzinfo] = None) -> List[Record]:
    return events_on_day(store, local_naive(now(), tz).date(), tz=tz)


def all_events_sorted(store: RecordStore, *, tz: Optional[dt.tzinfo] = None) -> List[Record]:
    """Events by ascending start; unparseable starts go last in stored order."""
    evs = records(store, KEY)

    def _key(pair: tuple) -> tuple:
        pos, e = pair
        start = wall_clock(e.get("start"), tz)
        return (start is None, start or dt.datetime.min, pos)

    return [e for _, e in sorted(enumerate(evs), key=_key)]


def search_events(store: RecordStore, term: str) -> List[Record]:
    needle = (term or "").lower()
    out = []
    for e in records(store, KEY):
        title = str(e.get("title") or "").lower()
        location = str(e.get("location") or "").lower()
        if needle in title or (location and needle in location):
            out.append(e)
    return out
