from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from today_sports.core.text import join_name_parts
from today_sports.core.timewindow import TodayWindow, local_date_of
from today_sports.db.enums import LeagueEnum, ProviderEnum
from today_sports.ingestion.dates import ET, parse_instant
from today_sports.ingestion.providers.base.adapter import BaseScheduleSource
from today_sports.ingestion.providers.base.types import (
    CanonicalEvent,
    as_list,
    coerce_score,
    dig,
    dig_str,
)
from today_sports.ingestion.status import normalize_nhl_status

NHL_SITE_URL = "https://www.nhl.com"

ApiItem = dict[str, Any]


def nhl_team_name(team: Any) -> str:
    """Place + common name ("Edmonton Oilers"), or the abbreviation when both are missing."""

    name = join_name_parts(dig(team, "placeName", "default"), dig(team, "commonName", "default"))
    if name:
        return name
    return dig_str(team, "abbrev") or ""


@dataclass
class NhlScheduleSource(BaseScheduleSource):
    """
    NHL web API schedule (`/schedule/{date}`), which returns a whole game week.
    """

    league: LeagueEnum = LeagueEnum.NHL
    provider_key: str = ProviderEnum.NHL_WEB.value

    def _fetch_events(self, window: TodayWindow) -> list[CanonicalEvent]:
        # The week starts at the Eastern date the window opens on, so it covers the window.
        query_date = window.start_utc.astimezone(ET).date()
        payload = self.http.get_json(f"/schedule/{query_date.isoformat()}")

        events: list[CanonicalEvent] = []
        for day in as_list(payload.get("gameWeek")):
            for game in as_list(dig(day, "games")):
                if not isinstance(game, dict):
                    continue
                event = self._game_to_event(game, window)
                if event is not None:
                    events.append(event)
        return events

    def _game_to_event(self, game: ApiItem, window: TodayWindow) -> CanonicalEvent | None:
        raw_start = dig_str(game, "startTimeUTC")
        start = parse_instant(raw_start)
        # Local calendar date in the requested zone, never the provider's date string.
        if start is None or local_date_of(start, window.timezone) != window.local_date:
            return None

        home = dig(game, "homeTeam") or {}
        away = dig(game, "awayTeam") or {}

        link_path = dig_str(game, "gameCenterLink")

        return CanonicalEvent(
            external_id=dig_str(game, "id") or "",
            league=self.league,
            status=normalize_nhl_status(game.get("gameState")),
            start_time=start,
            start_time_raw=raw_start,
            venue=dig_str(game, "venue", "default"),
            venue_timezone=dig_str(game, "venueTimezone"),
            home_team=nhl_team_name(home),
            away_team=nhl_team_name(away),
            home_score=coerce_score(dig(home, "score")),
            away_score=coerce_score(dig(away, "score")),
            link=f"{NHL_SITE_URL}{link_path}" if link_path else None,
        )
