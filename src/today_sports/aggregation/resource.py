from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from today_sports.db.enums import GameStatusEnum
from today_sports.ingestion.providers.base.types import CanonicalEvent


def event_to_json(event: CanonicalEvent) -> dict[str, Any]:
    """Public JSON shape of one event."""

    return {
        "id": event.external_id,
        "league": event.league.value,
        "sport": event.league.value,
        "status": event.status.value,
        "startTime": event.start_time_iso,
        "startTimeUTC": event.start_time_raw,
        "venue": event.venue,
        "venueTimezone": event.venue_timezone,
        "homeTeam": event.home_team,
        "awayTeam": event.away_team,
        "homeScore": event.home_score,
        "awayScore": event.away_score,
        "link": event.link,
        "isLive": event.status is GameStatusEnum.LIVE,
    }


def events_to_json(events: Iterable[CanonicalEvent]) -> list[dict[str, Any]]:
    return [event_to_json(e) for e in events]
