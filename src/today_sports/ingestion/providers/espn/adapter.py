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
from today_sports.ingestion.status import normalize_espn_status

ApiItem = dict[str, Any]


def find_competitor(competitors: Any, side: str) -> ApiItem:
    """Competitors are unordered; pick the one tagged `side` ("home"/"away")."""

    if not isinstance(competitors, list):
        return {}
    for competitor in competitors:
        if isinstance(competitor, dict) and competitor.get("homeAway") == side:
            return competitor
    return {}


def competitor_score(competitor: ApiItem) -> int:
    score = competitor.get("score")
    if isinstance(score, dict):
        return coerce_score(score.get("value"))
    return coerce_score(score)


@dataclass
class EspnNflScheduleSource(BaseScheduleSource):
    """ESPN partners API (`/events?dates=YYYYMMDD-YYYYMMDD`) for NFL games."""

    league: LeagueEnum = LeagueEnum.NFL
    provider_key: str = ProviderEnum.ESPN.value

    def _dates_param(self, window: TodayWindow) -> str:
        days = eastern_dates(window)
        return f"{days[0]:%Y%m%d}-{days[-1]:%Y%m%d}"

    def _fetch_events(self, window: TodayWindow) -> list[CanonicalEvent]:
        payload = self.http.get_json("/events", params={"dates": self._dates_param(window)})
        return [
            self._event_to_canonical(item)
            for item in as_list(payload.get("events"))
            if isinstance(item, dict)
        ]

    def _event_to_canonical(self, item: ApiItem) -> CanonicalEvent:
        event_id = dig_str(item, "id") or ""
        raw_start = dig_str(item, "date")
        competition = dig(item, "competitions", 0) or {}

        home = find_competitor(dig(competition, "competitors"), "home")
        away = find_competitor(dig(competition, "competitors"), "away")

        return CanonicalEvent(
            external_id=event_id,
            league=self.league,
            status=normalize_espn_status(dig(competition, "status", "type", "name")),
            start_time=instant_or_now(
                parse_instant(raw_start), raw=raw_start, league="NFL", external_id=event_id
            ),
            start_time_raw=raw_start,
            venue=dig_str(competition, "venue", "fullName"),
            home_team=dig_str(home, "team", "displayName") or "",
            away_team=dig_str(away, "team", "displayName") or "",
            home_score=competitor_score(home),
            away_score=competitor_score(away),
            link=dig_str(item, "links", 0, "href"),
        )
