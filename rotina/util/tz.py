# rotina/util/tz.py
from __future__ import annotations

import datetime as dt
import re
from typing import Callable, Optional
from zoneinfo import ZoneInfo

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

Clock = Callable[[], dt.datetime]


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "America/Sao_Paulo"
      - Fixed offsets: "-03:00", "-0300", "+01:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system", "native"}:
        return "local"
    if low in {"utc", "z", "gmt", "utc0", "utc+0"}:
        return "UTC"

    return s


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        tz = dt.datetime.now().astimezone().tzinfo
        return tz or dt.timezone.utc

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(dt.timedelta(minutes=sign * (hh * 60 + mm)))

    try:
        return ZoneInfo(tz_name)
    except Exception as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def system_clock(tz: dt.tzinfo) -> Clock:
    """Return a `now()` source bound to `tz`."""

    def _now() -> dt.datetime:
        return dt.datetime.now(tz=tz)

    return _now


def fixed_clock(at: dt.datetime) -> Clock:
    def _now() -> dt.datetime:
        return at

    return _now


def local_naive(value: dt.datetime, tz: Optional[dt.tzinfo]) -> dt.datetime:
    """Wall-clock view of `value` in `tz` with tzinfo dropped.

    Naive values are already wall-clock and pass through unchanged.
    """
    if value.tzinfo is None:
        return value
    if tz is not None:
        value = value.astimezone(tz)
    return value.replace(tzinfo=None)


def today_date(now: Clock, tz: Optional[dt.tzinfo] = None) -> dt.date:
    return local_naive(now(), tz).date()
