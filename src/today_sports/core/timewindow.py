from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class InvalidTimezoneError(ValueError):
    """Requested timezone is not a known IANA identifier."""


def load_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimezoneError(f"Unknown timezone: {name!r}") from e


def _local_midnight_utc(day: date, tz: ZoneInfo) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=tz).astimezone(UTC)


@dataclass(frozen=True)
class TodayWindow:
    """
    Half-open UTC interval [local midnight, next local midnight) for one
    calendar date in one timezone.
    """

    local_date: date
    timezone: str
    start_utc: datetime
    end_utc: datetime

    def contains(self, instant: datetime) -> bool:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        return self.start_utc <= instant < self.end_utc


def resolve_today_window(
    timezone: str,
    day: date | None = None,
    *,
    now: datetime | None = None,
) -> TodayWindow:
    """Return the UTC window of `day` (default: today) as seen in `timezone`."""

    tz = load_timezone(timezone)

    if day is None:
        current = now if now is not None else datetime.now(tz=UTC)
        if current.tzinfo is None:
            current = current.replace(tzinfo=UTC)
        day = current.astimezone(tz).date()

    # Next midnight comes from the next calendar date, not +24h (DST days differ).
    return TodayWindow(
        local_date=day,
        timezone=timezone,
        start_utc=_local_midnight_utc(day, tz),
        end_utc=_local_midnight_utc(day + timedelta(days=1), tz),
    )


def local_date_of(instant: datetime, timezone: str) -> date:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    return instant.astimezone(load_timezone(timezone)).date()
