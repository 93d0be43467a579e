from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from today_sports.db.enums import GameStatusEnum, LeagueEnum
from today_sports.ingestion.dates import to_iso_z


def dig(obj: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists; None as soon as a step is missing or the wrong shape."""

    cur = obj
    for step in path:
        if isinstance(step, int):
            if not isinstance(cur, list) or not -len(cur) <= step < len(cur):
                return None
            cur = cur[step]
        else:
            if not isinstance(cur, dict):
                return None
            cur = cur.get(step)
        if cur is None:
            return None
    return cur


def as_list(value: Any) -> list[Any]:
    """`value` when it is a list, else an empty list."""

    return value if isinstance(value, list) else []


def dig_str(obj: Any, *path: str | int) -> str | None:
    value = dig(obj, *path)
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def coerce_score(value: Any) -> int:
    """Scores arrive as ints, floats, numeric strings or not at all."""

    if isinstance(value, bool) or value is None:
        return 0
    try:
        score = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(score, 0)


@dataclass(frozen=True)
class CanonicalEvent:
    """
    Provider-independent representation of one game.

    Shared by the live aggregation path and the ingestion path.
    """

    external_id: str
    league: LeagueEnum
    status: GameStatusEnum
    start_time: datetime
    start_time_raw: str | None = None
    venue: str | None = None
    venue_timezone: str | None = None
    home_team: str = ""
    away_team: str = ""
    home_score: int = 0
    away_score: int = 0
    link: str | None = None

    def __post_init__(self) -> None:
        start = self.start_time
        if start.tzinfo is None:
            start = start.replace(tzinfo=UTC)
        object.__setattr__(self, "start_time", start.astimezone(UTC))
        object.__setattr__(self, "home_score", coerce_score(self.home_score))
        object.__setattr__(self, "away_score", coerce_score(self.away_score))

    @property
    def start_time_iso(self) -> str:
        return to_iso_z(self.start_time)


@dataclass(frozen=True)
class SourceFetch:
    """Outcome of one provider fetch: events, or an empty list plus the soft-failure reason."""

    league: LeagueEnum
    events: list[CanonicalEvent] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None
