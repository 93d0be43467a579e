from __future__ import annotations

import httpx
import pytest
import sqlalchemy as sa
from sqlalchemy.orm import Session

import today_sports.db.models  # noqa: F401
from today_sports.db.base import Base
from today_sports.db.enums import LeagueEnum
from today_sports.db.models.core.team import Team
from today_sports.ingestion.providers.base.client import BaseHttpClient
from today_sports.ingestion.teams import (
    TeamRecord,
    fetch_espn_teams,
    fetch_nhl_teams,
    ingest_teams,
)


def _make_session() -> Session:
    engine = sa.create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    return Session(engine)


def test_fetch_nhl_teams_from_standings() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/standings/now"
        return httpx.Response(
            200,
            json={
                "standings": [
                    {
                        "teamAbbrev": {"default": "EDM"},
                        "teamName": {"default": "Edmonton Oilers"},
                    },
                    {"teamAbbrev": {"default": "XXX"}},
                ]
            },
        )

    http = BaseHttpClient(
        base_url="https://api-web.nhle.com/v1", transport=httpx.MockTransport(handler)
    )

    records = fetch_nhl_teams(http)

    assert records == [
        TeamRecord(
            league=LeagueEnum.NHL,
            name="Edmonton Oilers",
            abbreviation="EDM",
            logo_url="https://assets.nhle.com/logos/nhl/svg/EDM_light.svg",
        )
    ]


def test_fetch_espn_teams_reads_colors_and_logos() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/apis/site/v2/sports/football/nfl/teams"
        return httpx.Response(
            200,
            json={
                "sports": [
                    {
                        "leagues": [
                            {
                                "teams": [
                                    {
                                        "team": {
                                            "displayName": "Kansas City Chiefs",
                                            "abbreviation": "KC",
                                            "color": "e31837",
                                            "alternateColor": "nothex",
                                            "logos": [{"href": "https://a.espncdn.com/kc.png"}],
                                        }
                                    },
                                    {"team": {"displayName": "No Abbreviation"}},
                                ]
                            }
                        ]
                    }
                ]
            },
        )

    http = BaseHttpClient(
        base_url="https://site.api.espn.com/apis/site/v2/sports",
        transport=httpx.MockTransport(handler),
    )

    (chiefs,) = fetch_espn_teams(http, LeagueEnum.NFL)

    assert chiefs.name == "Kansas City Chiefs"
    assert chiefs.abbreviation == "KC"
    assert chiefs.primary_color == "#E31837"
    assert chiefs.secondary_color is None
    assert chiefs.logo_url == "https://a.espncdn.com/kc.png"

    with pytest.raises(ValueError):
        fetch_espn_teams(http, LeagueEnum.NHL)


def test_ingest_teams_upserts_by_league_and_name() -> None:
    session = _make_session()
    first = [
        TeamRecord(league=LeagueEnum.NBA, name="Boston Celtics", abbreviation="BOS"),
        TeamRecord(league=LeagueEnum.NBA, name="New York Knicks", abbreviation="NYK"),
        TeamRecord(league=LeagueEnum.NHL, name="Boston Bruins", abbreviation="BOS"),
    ]

    result = ingest_teams(session, league=LeagueEnum.NBA, records=first)
    assert (result.teams_seen, result.teams_created, result.teams_updated) == (2, 2, 0)

    again = ingest_teams(
        session,
        league=LeagueEnum.NBA,
        records=[
            TeamRecord(
                league=LeagueEnum.NBA,
                name="Boston Celtics",
                abbreviation="BOS",
                primary_color="#007A33",
            )
        ],
    )
    assert (again.teams_created, again.teams_updated) == (0, 1)

    teams = session.execute(sa.select(Team).order_by(Team.name)).scalars().all()
    assert [t.name for t in teams] == ["Boston Celtics", "New York Knicks"]
    assert teams[0].primary_color == "#007A33"
