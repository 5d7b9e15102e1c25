"""Record presence checks and id allocation (library-facing)."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence


class RecordValidationError(ValueError):
    """Raised when a record is missing a required field."""


def require_text(value: Any, field: str) -> str:
    s = "" if value is None else str(value).strip()
    if not s:
        raise RecordValidationError(f"{field} is required")
    return s


def optional_text(value: Any) -> Optional[str]:
    s = "" if value is None else str(value).strip()
    return s or None


def require_amount(value: Any, field: str = "amount") -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    s = require_text(value, field).replace(",", ".")
    try:
        return float(s)
    except ValueError as ex:
        raise RecordValidationError(f"{field} must be a number, got {value!r}") from ex


def require_choice(value: Any, field: str, choices: Sequence[str]) -> str:
    s = require_text(value, field)
    if s not in choices:
        raise RecordValidationError(f"{field} must be one of {', '.join(choices)}; got {s!r}")
    return s


def next_record_id(records: List[Dict[str, Any]], now: dt.datetime) -> int:
    """Epoch-ms id at `now`, bumped past any existing id so ids stay unique."""
    candidate = int(now.timestamp() * 1000)
    for r in records:
        rid = r.get("id") if isinstance(r, dict) else None
        if isinstance(rid, int) and rid >= candidate:
            candidate = rid + 1
    return candidate


__all__ = [
    "RecordValidationError",
    "next_record_id",
    "optional_text",
    "require_amount",
    "require_choice",
    "require_text",
]
