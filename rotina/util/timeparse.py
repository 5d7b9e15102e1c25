# rotina/util/timeparse.py
from __future__ import annotations

import datetime as dt
import re
from typing import List, Optional, Tuple

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_YYYY_MM_RE = re.compile(r"^(\d{4})-(\d{1,2})$")
_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_hhmm(s: str) -> Tuple[int, int]:
    m = _HHMM_RE.match(s.strip())
    if not m:
        raise ValueError(f"Invalid HH:MM: {s!r}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        raise ValueError(f"Invalid HH:MM: {s!r}")
    return hh, mm


def parse_times_list(s: Optional[str]) -> List[str]:
    """Parse "08:00, 12:00,16:00" into ["08:00", "12:00", "16:00"]."""
    if not s:
        return []
    out: List[str] = []
    for part in str(s).split(","):
        part = part.strip()
        if not part:
            continue
        hh, mm = parse_hhmm(part)
        out.append(f"{hh:02d}:{mm:02d}")
    return out


def parse_csv_list(s: Optional[str]) -> List[str]:
    if not s:
        return []
    return [p.strip() for p in str(s).split(",") if p.strip()]


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def parse_month_yyyy_mm(s: str) -> Tuple[int, int]:
    m = _YYYY_MM_RE.match(s.strip())
    if not m:
        raise ValueError(f"Invalid YYYY-MM: {s!r}")
    year = int(m.group(1))
    month = int(m.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid YYYY-MM: {s!r}")
    return year, month


def parse_timestamp(s: object) -> Optional[dt.datetime]:
    """Parse a stored timestamp string; None when it cannot be parsed.

    Accepts `datetime-local` form ("2024-03-15T14:30"), full ISO-8601 with
    seconds, a trailing "Z" or an explicit offset, and date-only values
    ("2024-03-15", read as midnight). Naive results are wall-clock times.
    """
    if isinstance(s, dt.datetime):
        return s
    if isinstance(s, dt.date):
        return dt.datetime(s.year, s.month, s.day)
    if not isinstance(s, str):
        return None
    raw = s.strip()
    if not raw:
        return None
    if _DATE_ONLY_RE.match(raw):
        try:
            d = parse_date_yyyy_mm_dd(raw)
        except ValueError:
            return None
        return dt.datetime(d.year, d.month, d.day)
    try:
        return dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_date_value(s: object) -> Optional[dt.date]:
    """Calendar date of a stored date or timestamp string."""
    ts = parse_timestamp(s)
    return ts.date() if ts is not None else None
