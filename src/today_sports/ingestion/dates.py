from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import structlog

from today_sports.core.timewindow import TodayWindow

logger = structlog.get_logger(__name__)

ET = ZoneInfo("America/New_York")


def to_iso_z(dt: datetime) -> str:
    """Zero-padded UTC ISO-8601 string; lexical order equals chronological order."""

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def _parse_iso(value: str) -> datetime:
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    return datetime.fromisoformat(v)


def parse_instant(value: Any) -> datetime | None:
    """
    Parse a provider timestamp into a tz-aware UTC datetime.

    Accepts "2025-10-22T23:00:00Z", explicit offsets, minute precision
    ("2024-09-08T17:00Z") and naive values (read as UTC).
    Returns None when the value is absent or unparsable.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        dt = _parse_iso(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def reinterpret_eastern(value: Any) -> datetime | None:
    """
    Read a timestamp as US Eastern wall-clock time, ignoring its zone suffix.

    The NBA feeds label Eastern tip-off times with a trailing "Z":
    "2024-01-15T19:30:00Z" is 19:30 in New York, i.e. 00:30 UTC the next day.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        dt = _parse_iso(value)
    except ValueError:
        return None
    return dt.replace(tzinfo=ET).astimezone(UTC)


def instant_or_now(
    parsed: datetime | None,
    *,
    raw: Any = None,
    now: datetime | None = None,
    **context: Any,
) -> datetime:
    """Lenient fallback: an unknown start time becomes the current instant."""

    if parsed is not None:
        return parsed
    logger.warning("start_time_unparsable", raw=raw, **context)
    return now if now is not None else datetime.now(tz=UTC)


def eastern_dates(window: TodayWindow) -> list[date]:
    """US Eastern calendar dates overlapped by `window`, in order."""

    first = window.start_utc.astimezone(ET).date()
    last = (window.end_utc - timedelta(microseconds=1)).astimezone(ET).date()
    days = [first]
    while days[-1] < last:
        days.append(days[-1] + timedelta(days=1))
    return days
