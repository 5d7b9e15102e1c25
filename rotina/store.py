# rotina/store.py
"""JSON-document record store.

Every collection lives under a string key in a single JSON object on disk.
Reads never fail on bad content: an absent key, a non-list value or an
unreadable document all read back as the default.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .util.console import eprint, obs_enabled

DATA_KEYS: Dict[str, str] = {
    "TASKS": "minhaRotina_tasks",
    "EVENTS": "minhaRotina_events",
    "MEDS": "minhaRotina_medications",
    "HEALTH": "minhaRotina_health",
    "STUDY": "minhaRotina_study",
    "WORKOUT": "minhaRotina_workout",
    "PROJECTS": "minhaRotina_projects",
    "CHORES": "minhaRotina_chores",
    "LISTS": "minhaRotina_lists",
    "FINANCE": "minhaRotina_finance",
    "DEVOTIONAL": "minhaRotina_devotional",
    "CONFIG": "minhaRotina_config",
}

STORE_FILENAME = "store.json"

StorePath = Union[str, Path]


def default_home() -> Path:
    raw = (os.getenv("ROTINA_HOME", "") or "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".rotina"


class RecordStore:
    def __init__(self, path: StorePath) -> None:
        p = Path(path)
        if p.suffix != ".json":
            p = p / STORE_FILENAME
        self.path = p

    @classmethod
    def at_home(cls, home: Optional[StorePath] = None) -> "RecordStore":
        return cls(Path(home) if home else default_home())

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8", errors="replace"))
        except (OSError, ValueError) as ex:
            if obs_enabled():
                eprint(f"[rotina.store] WARN: unreadable store {self.path}: {ex}")
            return {}
        if not isinstance(doc, dict):
            if obs_enabled():
                eprint(f"[rotina.store] WARN: store {self.path} is not a JSON object; ignoring")
            return {}
        return doc

    def _write(self, doc: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(
            json.dumps(doc, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
            newline="\n",
        )
        tmp.replace(self.path)

    def get(self, key: str, default: Optional[List[Any]] = None) -> List[Any]:
        fallback = [] if default is None else default
        value = self._read().get(key)
        if not isinstance(value, list):
            if value is not None and obs_enabled():
                eprint(f"[rotina.store] WARN: key {key!r} holds {type(value).__name__}, expected list")
            return fallback
        return value

    def set(self, key: str, value: List[Any]) -> None:
        if not isinstance(value, list):
            raise TypeError(f"value must be list, got {type(value).__name__}")
        doc = self._read()
        doc[key] = value
        self._write(doc)

    def remove(self, key: str) -> bool:
        doc = self._read()
        if key not in doc:
            return False
        del doc[key]
        self._write(doc)
        return True

    def clear(self, keys: Iterable[str]) -> int:
        doc = self._read()
        removed = 0
        for k in keys:
            if k in doc:
                del doc[k]
                removed += 1
        if removed:
            self._write(doc)
        return removed

    def keys(self) -> List[str]:
        return sorted(self._read().keys())


__all__ = ["DATA_KEYS", "RecordStore", "default_home"]
