# rotina/backup.py
from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import Any, Dict, List, Union

from .collection import records
from .store import DATA_KEYS, RecordStore
from .tasks import KEY as TASKS_KEY
from .events import KEY as EVENTS_KEY

MIN_SEARCH_LEN = 2


def export_data(store: RecordStore) -> Dict[str, List[Any]]:
    return {name: store.get(key) for name, key in DATA_KEYS.items()}


def backup_filename(today: dt.date) -> str:
    return f"minha-rotina-backup-{today.isoformat()}.json"


def write_export(store: RecordStore, out_dir: Union[str, Path], today: dt.date) -> Path:
    out = Path(out_dir) / backup_filename(today)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(
        json.dumps(export_data(store), ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
        newline="\n",
    )
    return out


def clear_all_data(store: RecordStore) -> int:
    return store.clear(DATA_KEYS.values())


def global_search(store: RecordStore, term: str) -> List[Dict[str, Any]]:
    """Tasks and events whose title contains `term`, tasks first.

    Terms shorter than two characters match nothing.
    """
    needle = (term or "").strip().lower()
    if len(needle) < MIN_SEARCH_LEN:
        return []
    out: List[Dict[str, Any]] = []
    for kind, key in (("task", TASKS_KEY), ("event", EVENTS_KEY)):
        for r in records(store, key):
            if needle in str(r.get("title") or "").lower():
                out.append({"kind": kind, **r})
    return out
