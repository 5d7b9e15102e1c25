# rotina/medications.py
from __future__ import annotations

import datetime as dt
from typing import Any, List, Optional

from .collection import Record, append_record, delete_record, iso_now, records, update_record
from .store import DATA_KEYS, RecordStore
from .util.timeparse import parse_date_value, parse_times_list
from .util.tz import Clock
from .validate import RecordValidationError, next_record_id, optional_text, require_text

KEY = DATA_KEYS["MEDS"]


def add_medication(
    store: RecordStore,
    *,
    name: str,
    dose: str,
    now: Clock,
    times: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Record:
    at = now()
    try:
        parsed_times = parse_times_list(times)
    except ValueError as ex:
        raise RecordValidationError(str(ex)) from ex
    med = {
        "id": next_record_id(records(store, KEY), at),
        "name": require_text(name, "name"),
        "dose": require_text(dose, "dose"),
        "times": parsed_times,
        "start_date": optional_text(start_date),
        "end_date": optional_text(end_date),
        "taken": [],
        "created_at": iso_now(at),
    }
    return append_record(store, KEY, med)


def delete_medication(store: RecordStore, med_id: Any) -> bool:
    return delete_record(store, KEY, med_id)


def list_medications(store: RecordStore) -> List[Record]:
    return records(store, KEY)


def active_medications(store: RecordStore, day: dt.date) -> List[Record]:
    """Medications whose start/end window includes `day` (open ends allowed)."""
    out = []
    for m in records(store, KEY):
        start = parse_date_value(m.get("start_date"))
        end = parse_date_value(m.get("end_date"))
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        out.append(m)
    return out


def take_medication(store: RecordStore, med_id: Any, *, now: Clock) -> bool:
    at = iso_now(now())

    def _log(m: Record) -> None:
        taken = m.get("taken")
        if not isinstance(taken, list):
            taken = []
        taken.append(at)
        m["taken"] = taken

    return update_record(store, KEY, med_id, _log) is not None
