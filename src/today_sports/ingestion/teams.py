"""
Team reference data.

Teams are written by this separate path only; the event store reads them to
link games by (league, display name).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy.orm import Session

from today_sports.db.enums import LeagueEnum
from today_sports.db.repos.core.team_repo import TeamRepository
from today_sports.ingestion.providers.base.client import BaseHttpClient
from today_sports.ingestion.providers.base.types import as_list, dig, dig_str

logger = structlog.get_logger(__name__)

NHL_LOGO_URL = "https://assets.nhle.com/logos/nhl/svg/{abbrev}_light.svg"

# ESPN site API path segments per league.
ESPN_TEAM_PATHS: dict[LeagueEnum, str] = {
    LeagueEnum.NBA: "basketball/nba",
    LeagueEnum.MLB: "baseball/mlb",
    LeagueEnum.NFL: "football/nfl",
}


@dataclass(frozen=True)
class TeamRecord:
    league: LeagueEnum
    name: str
    abbreviation: str
    logo_url: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None


@dataclass(frozen=True)
class IngestTeamsResult:
    league: LeagueEnum
    teams_seen: int
    teams_created: int
    teams_updated: int


def _hex_color(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    v = value.strip().lstrip("#")
    if len(v) != 6:
        return None
    try:
        int(v, 16)
    except ValueError:
        return None
    return f"#{v.upper()}"


def fetch_nhl_teams(http: BaseHttpClient) -> list[TeamRecord]:
    """Current NHL clubs from `/standings/now`."""

    payload = http.get_json("/standings/now")
    records: list[TeamRecord] = []
    for standing in as_list(payload.get("standings")):
        abbrev = dig_str(standing, "teamAbbrev", "default")
        name = dig_str(standing, "teamName", "default")
        if not abbrev or not name:
            continue
        records.append(
            TeamRecord(
                league=LeagueEnum.NHL,
                name=name,
                abbreviation=abbrev,
                logo_url=NHL_LOGO_URL.format(abbrev=abbrev),
            )
        )
    return records


def fetch_espn_teams(http: BaseHttpClient, league: LeagueEnum) -> list[TeamRecord]:
    """NBA/MLB/NFL clubs from the ESPN site API `/{sport}/{league}/teams`."""

    path = ESPN_TEAM_PATHS.get(league)
    if path is None:
        raise ValueError(f"ESPN teams are not available for league={league.value}")

    payload = http.get_json(f"/{path}/teams")
    records: list[TeamRecord] = []
    for wrapper in as_list(dig(payload, "sports", 0, "leagues", 0, "teams")):
        team = dig(wrapper, "team")
        if not isinstance(team, dict):
            continue
        name = dig_str(team, "displayName")
        abbrev = dig_str(team, "abbreviation")
        if not name or not abbrev:
            continue
        records.append(
            TeamRecord(
                league=league,
                name=name,
                abbreviation=abbrev,
                logo_url=dig_str(team, "logos", 0, "href"),
                primary_color=_hex_color(team.get("color")),
                secondary_color=_hex_color(team.get("alternateColor")),
            )
        )
    return records


def ingest_teams(
    session: Session,
    *,
    league: LeagueEnum,
    records: Iterable[TeamRecord],
) -> IngestTeamsResult:
    """Upsert teams keyed by (league, name)."""

    repo = TeamRepository(session)
    seen = created = updated = 0

    for record in records:
        if record.league != league:
            continue
        seen += 1
        _, was_created = repo.upsert_by_name(
            league,
            record.name,
            {
                "abbreviation": record.abbreviation,
                "logo_url": record.logo_url,
                "primary_color": record.primary_color,
                "secondary_color": record.secondary_color,
            },
        )
        if was_created:
            created += 1
        else:
            updated += 1

    logger.info(
        "teams_ingested",
        league=league.value,
        seen=seen,
        created=created,
        updated=updated,
    )
    return IngestTeamsResult(
        league=league, teams_seen=seen, teams_created=created, teams_updated=updated
    )
