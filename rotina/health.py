# rotina/health.py
from __future__ import annotations

from typing import Any, List, Optional

from .collection import Record, append_record, delete_record, iso_now, records
from .store import DATA_KEYS, RecordStore
from .util.tz import Clock
from .validate import next_record_id, optional_text, require_text

KEY = DATA_KEYS["HEALTH"]
METRIC_TYPES = ("weight", "glucose", "spo2", "bpm", "pressure")
RECENT_SHOWN = 5


def add_metric(
    store: RecordStore,
    *,
    metric_type: str,
    value: str,
    now: Clock,
    date: Optional[str] = None,
    notes: Optional[str] = None,
) -> Record:
    at = now()
    metric = {
        "id": next_record_id(records(store, KEY), at),
        "type": require_text(metric_type, "type"),
        "value": require_text(value, "value"),
        "notes": optional_text(notes),
        "date": optional_text(date) or at.date().isoformat(),
        "created_at": iso_now(at),
    }
    return append_record(store, KEY, metric)


def delete_metric(store: RecordStore, metric_id: Any) -> bool:
    return delete_record(store, KEY, metric_id)


def recent_metrics(store: RecordStore, limit: int = RECENT_SHOWN) -> List[Record]:
    items = records(store, KEY)
    return items[-limit:] if limit > 0 else []
