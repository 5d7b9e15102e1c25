# rotina/config.py
from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .model import WeekStart
from .store import DATA_KEYS, RecordStore
from .util.tz import normalize_tz_name

KEY = DATA_KEYS["CONFIG"]


def _env_week_start() -> str:
    raw = (os.getenv("ROTINA_WEEK_START", "") or "").strip()
    return raw or WeekStart.MONDAY.value


def _env_tz() -> str:
    return normalize_tz_name(os.getenv("ROTINA_TZ", "local"))


@dataclass
class Settings:
    notifications_enabled: bool = False
    week_start: str = WeekStart.MONDAY.value
    tz: str = "local"

    @property
    def week_starts_on(self) -> WeekStart:
        return WeekStart.parse(self.week_start)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def default_settings() -> Settings:
    return Settings(week_start=_env_week_start(), tz=_env_tz())


def load_settings(store: RecordStore) -> Settings:
    """Stored settings over environment defaults.

    The config key holds a one-element list with the settings object; any
    other shape reads back as the defaults.
    """
    s = default_settings()
    stored = store.get(KEY)
    raw: Optional[Dict[str, Any]] = stored[0] if stored and isinstance(stored[0], dict) else None
    if raw is None:
        return s
    if isinstance(raw.get("notifications_enabled"), bool):
        s.notifications_enabled = raw["notifications_enabled"]
    ws = raw.get("week_start")
    if isinstance(ws, str):
        try:
            s.week_start = WeekStart.parse(ws).value
        except ValueError:
            pass
    tz = raw.get("tz")
    if isinstance(tz, str) and tz.strip():
        s.tz = normalize_tz_name(tz)
    return s


def save_settings(store: RecordStore, settings: Settings) -> None:
    WeekStart.parse(settings.week_start)
    store.set(KEY, [settings.to_dict()])
