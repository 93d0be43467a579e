from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from today_sports.core.timewindow import TodayWindow
from today_sports.db.enums import LeagueEnum, ProviderEnum
from today_sports.ingestion.dates import eastern_dates, instant_or_now, parse_instant
from today_sports.ingestion.providers.base.adapter import BaseScheduleSource
from today_sports.ingestion.providers.base.types import (
    CanonicalEvent,
    as_list,
    coerce_score,
    dig,
    dig_str,
)
from today_sports.ingestion.status import normalize_mlb_status

MLB_SITE_URL = "https://www.mlb.com"
MLB_SPORT_ID = 1

ApiItem = dict[str, Any]


@dataclass
class MlbScheduleSource(BaseScheduleSource):
    """MLB Stats API `/schedule`, hydrated with teams and linescores."""

    league: LeagueEnum = LeagueEnum.MLB
    provider_key: str = ProviderEnum.MLB_STATS.value

    def _params(self, window: TodayWindow) -> dict[str, Any]:
        params: dict[str, Any] = {"sportId": MLB_SPORT_ID, "hydrate": "team,linescore"}
        days = eastern_dates(window)
        if len(days) == 1:
            params["date"] = days[0].isoformat()
        else:
            params["startDate"] = days[0].isoformat()
            params["endDate"] = days[-1].isoformat()
        return params

    def _fetch_events(self, window: TodayWindow) -> list[CanonicalEvent]:
        payload = self.http.get_json("/schedule", params=self._params(window))

        events: list[CanonicalEvent] = []
        for d in as_list(payload.get("dates")):
            for game in as_list(dig(d, "games")):
                if isinstance(game, dict):
                    events.append(self._game_to_event(game))
        return events

    def _game_to_event(self, game: ApiItem) -> CanonicalEvent:
        game_pk = dig_str(game, "gamePk") or ""
        raw_start = dig_str(game, "gameDate")
        link_path = dig_str(game, "link")

        return CanonicalEvent(
            external_id=game_pk,
            league=self.league,
            status=normalize_mlb_status(dig(game, "status", "detailedState")),
            start_time=instant_or_now(
                parse_instant(raw_start), raw=raw_start, league="MLB", external_id=game_pk
            ),
            start_time_raw=raw_start,
            venue=dig_str(game, "venue", "name"),
            venue_timezone=dig_str(game, "venue", "timeZone", "id"),
            home_team=dig_str(game, "teams", "home", "team", "name") or "",
            away_team=dig_str(game, "teams", "away", "team", "name") or "",
            home_score=coerce_score(dig(game, "teams", "home", "score")),
            away_score=coerce_score(dig(game, "teams", "away", "score")),
            link=f"{MLB_SITE_URL}{link_path}" if link_path else None,
        )
