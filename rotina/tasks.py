# rotina/tasks.py
from __future__ import annotations

import datetime as dt
from typing import Any, List, Optional, Tuple

from .collection import Record, append_record, delete_record, iso_now, records, update_record, wall_clock
from .store import DATA_KEYS, RecordStore
from .util.tz import Clock, local_naive
from .validate import next_record_id, optional_text, require_choice, require_text

KEY = DATA_KEYS["TASKS"]
PRIORITIES = ("low", "medium", "high")
TASK_FILTERS = ("all", "today", "overdue", "next24")
COMPLETED_SHOWN = 10


def add_task(
    store: RecordStore,
    *,
    title: str,
    now: Clock,
    notes: Optional[str] = None,
    due: Optional[str] = None,
    priority: str = "medium",
    project: Optional[str] = None,
) -> Record:
    at = now()
    task = {
        "id": next_record_id(records(store, KEY), at),
        "title": require_text(title, "title"),
        "notes": optional_text(notes),
        "due": optional_text(due),
        "priority": require_choice(priority, "priority", PRIORITIES),
        "project": optional_text(project),
        "completed": False,
        "created_at": iso_now(at),
    }
    return append_record(store, KEY, task)


def complete_task(store: RecordStore, task_id: Any, *, now: Clock) -> bool:
    at = iso_now(now())

    def _done(t: Record) -> None:
        t["completed"] = True
        t["completed_at"] = at

    return update_record(store, KEY, task_id, _done) is not None


def delete_task(store: RecordStore, task_id: Any) -> bool:
    return delete_record(store, KEY, task_id)


def list_tasks(store: RecordStore) -> List[Record]:
    return records(store, KEY)


def _due(t: Record, tz: Optional[dt.tzinfo]) -> Optional[dt.datetime]:
    return wall_clock(t.get("due"), tz)


def today_tasks(store: RecordStore, *, now: Clock, tz: Optional[dt.tzinfo] = None) -> List[Record]:
    today = local_naive(now(), tz).date()
    out = []
    for t in records(store, KEY):
        due = _due(t, tz)
        if due is not None and due.date() == today and not t.get("completed"):
            out.append(t)
    return out


def filter_tasks(
    store: RecordStore,
    flt: str = "all",
    *,
    now: Clock,
    tz: Optional[dt.tzinfo] = None,
) -> List[Record]:
    """Apply a list filter: all | today | overdue | next24 | <project name>."""
    tasks = records(store, KEY)
    if flt == "all":
        return tasks

    current = local_naive(now(), tz)
    horizon = current + dt.timedelta(days=1)
    out = []
    for t in tasks:
        due = _due(t, tz)
        if flt == "today":
            keep = due is not None and due.date() == current.date()
        elif flt == "overdue":
            keep = due is not None and due < current and not t.get("completed")
        elif flt == "next24":
            keep = due is not None and current <= due <= horizon
        else:
            keep = t.get("project") == flt
        if keep:
            out.append(t)
    return out


def split_pending_completed(tasks: List[Record]) -> Tuple[List[Record], List[Record]]:
    pending = [t for t in tasks if not t.get("completed")]
    completed = [t for t in tasks if t.get("completed")]
    return pending, completed[-COMPLETED_SHOWN:]
