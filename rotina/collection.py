# rotina/collection.py
from __future__ import annotations

import datetime as dt
from typing import Any, Callable, Dict, List, Optional

from .store import RecordStore
from .util.timeparse import parse_timestamp
from .util.tz import local_naive

Record = Dict[str, Any]


def records(store: RecordStore, key: str) -> List[Record]:
    """Stored records under `key`, skipping non-dict entries."""
    return [r for r in store.get(key) if isinstance(r, dict)]


def find_record(store: RecordStore, key: str, record_id: Any) -> Optional[Record]:
    for r in records(store, key):
        if r.get("id") == record_id:
            return r
    return None


def append_record(store: RecordStore, key: str, rec: Record) -> Record:
    items = store.get(key)
    items.append(rec)
    store.set(key, items)
    return rec


def delete_record(store: RecordStore, key: str, record_id: Any) -> bool:
    items = store.get(key)
    kept = [r for r in items if not (isinstance(r, dict) and r.get("id") == record_id)]
    if len(kept) == len(items):
        return False
    store.set(key, kept)
    return True


def update_record(store: RecordStore, key: str, record_id: Any, fn: Callable[[Record], None]) -> Optional[Record]:
    items = store.get(key)
    for r in items:
        if isinstance(r, dict) and r.get("id") == record_id:
            fn(r)
            store.set(key, items)
            return r
    return None


def wall_clock(value: Any, tz: Optional[dt.tzinfo] = None) -> Optional[dt.datetime]:
    ts = parse_timestamp(value)
    return local_naive(ts, tz) if ts is not None else None


def iso_now(now: dt.datetime) -> str:
    return now.isoformat(timespec="seconds")
