from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog

from today_sports.core.timewindow import TodayWindow
from today_sports.db.enums import LeagueEnum, ProviderEnum
from today_sports.ingestion.dates import instant_or_now, parse_instant, reinterpret_eastern
from today_sports.ingestion.providers.base.adapter import BaseScheduleSource
from today_sports.ingestion.providers.base.errors import ProviderError, ProviderResponseError
from today_sports.ingestion.providers.base.types import (
    CanonicalEvent,
    as_list,
    coerce_score,
    dig,
    dig_str,
)
from today_sports.ingestion.status import normalize_nba_status

logger = structlog.get_logger(__name__)

SCOREBOARD_PATH = "/liveData/scoreboard/todaysScoreboard_00.json"
SEASON_SCHEDULE_PATH = "/staticData/scheduleLeagueV2.json"

ApiItem = dict[str, Any]


@dataclass
class NbaScheduleSource(BaseScheduleSource):
    """
    NBA CDN feeds.

    The live scoreboard always describes the provider's current day; the
    requested date is ignored. Its `gameEt` field carries a "Z" suffix but
    holds Eastern wall-clock time.
    """

    league: LeagueEnum = LeagueEnum.NBA
    provider_key: str = ProviderEnum.NBA_CDN.value

    def _fetch_events(self, window: TodayWindow) -> list[CanonicalEvent]:
        payload = self.http.get_json(SCOREBOARD_PATH)
        games = dig(payload, "scoreboard", "games")
        if games is None:
            return []
        if not isinstance(games, list):
            raise ProviderResponseError("NBA scoreboard 'games' is not a list")

        return [
            self._game_to_event(
                game,
                raw_start=dig_str(game, "gameEt"),
                utc_fallback=dig_str(game, "gameTimeUTC"),
            )
            for game in games
            if isinstance(game, dict)
        ]

    def fetch_season(self) -> list[CanonicalEvent]:
        """
        Full regular-season schedule for the bulk ingestion job.

        Never raises; an unavailable feed yields an empty list.
        """
        try:
            payload = self.http.get_json(SEASON_SCHEDULE_PATH)
        except ProviderError as e:
            logger.warning("nba_season_schedule_unavailable", error=str(e))
            return []

        events: list[CanonicalEvent] = []
        for game_date in as_list(dig(payload, "leagueSchedule", "gameDates")):
            for game in as_list(dig(game_date, "games")):
                if not isinstance(game, dict):
                    continue
                # gameDateTimeUTC is a true instant here; gameDateTimeEst repeats the "Z" quirk.
                utc_value = dig_str(game, "gameDateTimeUTC")
                start = parse_instant(utc_value)
                if start is not None:
                    events.append(self._game_to_event(game, raw_start=utc_value, start=start))
                else:
                    events.append(
                        self._game_to_event(game, raw_start=dig_str(game, "gameDateTimeEst"))
                    )
        return events

    def _game_to_event(
        self,
        game: ApiItem,
        *,
        raw_start: str | None,
        utc_fallback: str | None = None,
        start: datetime | None = None,
    ) -> CanonicalEvent:
        game_id = dig_str(game, "gameId") or ""
        if start is None:
            start = reinterpret_eastern(raw_start)
        if start is None:
            fallback = parse_instant(utc_fallback)
            if fallback is not None:
                start, raw_start = fallback, utc_fallback

        return CanonicalEvent(
            external_id=game_id,
            league=self.league,
            status=normalize_nba_status(game.get("gameStatusText")),
            start_time=instant_or_now(start, raw=raw_start, league="NBA", external_id=game_id),
            start_time_raw=raw_start,
            venue=dig_str(game, "arenaName"),
            home_team=dig_str(game, "homeTeam", "teamName") or "",
            away_team=dig_str(game, "awayTeam", "teamName") or "",
            # Scores arrive as numeric strings ("104").
            home_score=coerce_score(dig(game, "homeTeam", "score")),
            away_score=coerce_score(dig(game, "awayTeam", "score")),
            link=None,
        )
