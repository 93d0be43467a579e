from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime

import httpx
import sqlalchemy as sa
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import today_sports.db.models  # noqa: F401
from today_sports.aggregation.cache import CacheKey, InMemoryEventCache
from today_sports.aggregation.resource import event_to_json
from today_sports.aggregation.today import TodayEventsService, build_today_events_service
from today_sports.core.config import Settings
from today_sports.db.base import Base
from today_sports.db.enums import GameStatusEnum, LeagueEnum
from today_sports.ingestion.providers.base.types import CanonicalEvent, SourceFetch
from today_sports.ingestion.store import EventStore


def _event(league: LeagueEnum, external_id: str, start: datetime, **kw) -> CanonicalEvent:
    return CanonicalEvent(
        external_id=external_id,
        league=league,
        status=kw.pop("status", GameStatusEnum.SCHEDULED),
        start_time=start,
        home_team=kw.pop("home_team", f"Home {external_id}"),
        away_team=kw.pop("away_team", f"Away {external_id}"),
        **kw,
    )


@dataclass
class FakeSource:
    league: LeagueEnum
    events: list[CanonicalEvent] = field(default_factory=list)
    error: str | None = None
    provider_key: str = "fake"
    calls: list[tuple[date | None, str]] = field(default_factory=list)
    closed: bool = False

    def fetch_result(self, day: date | None, timezone: str) -> SourceFetch:
        self.calls.append((day, timezone))
        if self.error is not None:
            return SourceFetch(league=self.league, events=[], error=self.error)
        return SourceFetch(league=self.league, events=list(self.events))

    def fetch(self, day: date | None, timezone: str) -> list[CanonicalEvent]:
        return self.fetch_result(day, timezone).events

    def close(self) -> None:
        self.closed = True


NOW = datetime(2024, 1, 15, 17, 0, tzinfo=UTC)

# 19:00 ET, 21:30 ET and 22:00 PT on 2024-01-15.
EARLY = datetime(2024, 1, 16, 0, 0, tzinfo=UTC)
LATER = datetime(2024, 1, 16, 2, 30, tzinfo=UTC)
WEST_LATE = datetime(2024, 1, 16, 6, 0, tzinfo=UTC)


def _service(*sources: FakeSource, cache: InMemoryEventCache | None = None, **kw):
    return TodayEventsService(
        sources,
        cache if cache is not None else InMemoryEventCache(),
        now=lambda: NOW,
        **kw,
    )


def test_events_are_merged_filtered_to_the_window_and_sorted() -> None:
    nhl = FakeSource(LeagueEnum.NHL, [_event(LeagueEnum.NHL, "n1", LATER)])
    nfl = FakeSource(
        LeagueEnum.NFL,
        [_event(LeagueEnum.NFL, "f1", EARLY), _event(LeagueEnum.NFL, "f2", WEST_LATE)],
    )
    service = _service(nhl, nfl)

    events = service.get_today_events("America/New_York")

    assert [e.external_id for e in events] == ["f1", "n1"]
    assert nhl.calls == [(date(2024, 1, 15), "America/New_York")]


def test_today_depends_on_the_requested_timezone() -> None:
    nfl = FakeSource(
        LeagueEnum.NFL,
        [_event(LeagueEnum.NFL, "f1", EARLY), _event(LeagueEnum.NFL, "f2", WEST_LATE)],
    )
    service = _service(nfl)

    eastern = service.get_today_events("America/New_York", date(2024, 1, 15))
    pacific = service.get_today_events("America/Los_Angeles", date(2024, 1, 15))

    assert [e.external_id for e in eastern] == ["f1"]
    assert [e.external_id for e in pacific] == ["f1", "f2"]


def test_a_failing_provider_does_not_hide_the_others() -> None:
    nhl = FakeSource(LeagueEnum.NHL, error="HTTP 503")
    nba = FakeSource(LeagueEnum.NBA, [_event(LeagueEnum.NBA, "b1", EARLY)])
    mlb = FakeSource(LeagueEnum.MLB, error="timeout")
    service = _service(nhl, nba, mlb)

    events = service.get_today_events("America/New_York")

    assert [e.external_id for e in events] == ["b1"]


def test_cached_view_is_served_until_refreshed() -> None:
    nba = FakeSource(LeagueEnum.NBA, [_event(LeagueEnum.NBA, "b1", EARLY)])
    cache = InMemoryEventCache()
    service = _service(nba, cache=cache)

    first = service.get_today_events("America/New_York")
    nba.events.append(_event(LeagueEnum.NBA, "b2", LATER))
    second = service.get_today_events("America/New_York")

    assert len(nba.calls) == 1
    assert second == first
    assert cache.get(str(CacheKey("today", date(2024, 1, 15), "America/New_York"))) is not None

    # Other pairs are untouched by a refresh.
    service.get_today_events("America/Chicago")
    service.refresh_cache(date(2024, 1, 15), "America/New_York")
    refreshed = service.get_today_events("America/New_York")

    assert [e.external_id for e in refreshed] == ["b1", "b2"]
    assert cache.get(str(CacheKey("today", date(2024, 1, 15), "America/Chicago"))) is not None


def test_cache_entries_expire_after_their_ttl() -> None:
    t = 0.0
    cache = InMemoryEventCache(clock=lambda: t)
    nba = FakeSource(LeagueEnum.NBA, [_event(LeagueEnum.NBA, "b1", EARLY)])
    service = _service(nba, cache=cache, live_ttl_s=60.0)

    service.get_today_events("America/New_York")
    t = 59.0
    service.get_today_events("America/New_York")
    t = 60.0
    service.get_today_events("America/New_York")

    assert len(nba.calls) == 2


def test_cache_key_format() -> None:
    key = CacheKey("today", date(2024, 1, 15), "America/New_York")

    assert str(key) == "sports:today:2024-01-15:America/New_York"


def test_persisted_view_reads_stored_games_for_the_window() -> None:
    engine = sa.create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False)

    with factory() as session:
        EventStore(session, game_date_timezone="America/New_York").upsert_events(
            [
                _event(LeagueEnum.NHL, "n1", LATER, status=GameStatusEnum.LIVE, home_score=3),
                _event(LeagueEnum.NBA, "b1", EARLY),
                _event(LeagueEnum.MLB, "m1", WEST_LATE),
            ]
        )
        session.commit()

    service = _service(session_factory=factory)

    eastern = service.get_persisted_events("America/New_York", date(2024, 1, 15))
    pacific = service.get_persisted_events("America/Los_Angeles", date(2024, 1, 15))

    assert [e.external_id for e in eastern] == ["b1", "n1"]
    assert [e.external_id for e in pacific] == ["b1", "n1", "m1"]
    assert eastern[1].start_time == LATER
    assert eastern[1].status is GameStatusEnum.LIVE
    assert eastern[1].home_score == 3


def test_event_json_shape() -> None:
    event = _event(
        LeagueEnum.NHL,
        "n1",
        LATER,
        status=GameStatusEnum.LIVE,
        start_time_raw="2024-01-16T02:30:00Z",
        link="https://www.nhl.com/gamecenter/1",
    )

    body = event_to_json(event)

    assert body["id"] == "n1"
    assert body["league"] == "NHL"
    assert body["status"] == "live"
    assert body["isLive"] is True
    assert body["startTime"] == "2024-01-16T02:30:00Z"
    assert body["homeScore"] == 0
    assert body["link"] == "https://www.nhl.com/gamecenter/1"


def test_default_service_aggregates_every_provider_over_http() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == "api-web.nhle.com":
            return httpx.Response(
                200,
                json={
                    "gameWeek": [
                        {
                            "games": [
                                {
                                    "id": 1,
                                    "startTimeUTC": "2024-01-16T00:00:00Z",
                                    "gameState": "FUT",
                                    "homeTeam": {"abbrev": "NYR"},
                                    "awayTeam": {"abbrev": "BOS"},
                                }
                            ]
                        }
                    ]
                },
            )
        if host == "cdn.nba.com":
            return httpx.Response(
                200,
                json={
                    "scoreboard": {
                        "games": [
                            {
                                "gameId": "2",
                                "gameStatusText": "Final",
                                "gameEt": "2024-01-15T19:30:00Z",
                                "homeTeam": {"teamName": "Celtics", "score": "110"},
                                "awayTeam": {"teamName": "Knicks", "score": "100"},
                            }
                        ]
                    }
                },
            )
        if host == "statsapi.mlb.com":
            return httpx.Response(503)
        return httpx.Response(200, json={"events": []})

    service = build_today_events_service(Settings(), transport=httpx.MockTransport(handler))
    try:
        events = service.get_today_events("America/New_York", date(2024, 1, 15))
    finally:
        service.close()

    assert [(e.league, e.external_id) for e in events] == [
        (LeagueEnum.NHL, "1"),
        (LeagueEnum.NBA, "2"),
    ]
    assert events[1].status is GameStatusEnum.FINAL


def test_malformed_provider_payload_does_not_sink_aggregation() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host == "statsapi.mlb.com":
            return httpx.Response(200, json={"dates": [{"games": 5}]})
        if host == "cdn.nba.com":
            return httpx.Response(
                200,
                json={
                    "scoreboard": {
                        "games": [
                            {
                                "gameId": "2",
                                "gameEt": "2024-01-15T19:30:00Z",
                                "homeTeam": {"teamName": "Celtics"},
                                "awayTeam": {"teamName": "Knicks"},
                            }
                        ]
                    }
                },
            )
        if host == "api-web.nhle.com":
            return httpx.Response(200, json={"gameWeek": [{"games": {"id": 1}}]})
        return httpx.Response(200, json={"events": [{"competitions": 7}]})

    service = build_today_events_service(Settings(), transport=httpx.MockTransport(handler))
    try:
        events = service.get_today_events("America/New_York", date(2024, 1, 15))
    finally:
        service.close()

    assert [e.external_id for e in events] == ["2"]
