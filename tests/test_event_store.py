from __future__ import annotations

from datetime import UTC, date, datetime

import sqlalchemy as sa
from sqlalchemy.orm import Session

import today_sports.db.models  # noqa: F401
from today_sports.db.base import Base
from today_sports.db.enums import GameStatusEnum, LeagueEnum
from today_sports.db.models.core.game import Game
from today_sports.db.models.core.team import Team
from today_sports.ingestion.providers.base.types import CanonicalEvent
from today_sports.ingestion.store import EventStore, StoreResult, UpsertOutcome


def _make_session() -> Session:
    engine = sa.create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    return Session(engine)


def _event(**overrides) -> CanonicalEvent:
    fields = dict(
        external_id="401671789",
        league=LeagueEnum.NFL,
        status=GameStatusEnum.SCHEDULED,
        start_time=datetime(2024, 9, 8, 17, 0, tzinfo=UTC),
        start_time_raw="2024-09-08T17:00Z",
        venue="Arrowhead",
        home_team="Kansas City Chiefs",
        away_team="Baltimore Ravens",
    )
    fields.update(overrides)
    return CanonicalEvent(**fields)


def test_upsert_is_idempotent_and_latest_sighting_wins() -> None:
    session = _make_session()
    store = EventStore(session, game_date_timezone="America/New_York")

    assert store.upsert_event(_event()) is UpsertOutcome.CREATED
    assert store.upsert_event(_event()) is UpsertOutcome.UPDATED
    assert (
        store.upsert_event(_event(status=GameStatusEnum.FINAL, home_score=27, away_score=20))
        is UpsertOutcome.UPDATED
    )

    games = session.execute(sa.select(Game)).scalars().all()
    assert len(games) == 1
    game = games[0]
    assert game.game_date == date(2024, 9, 8)
    assert game.status is GameStatusEnum.FINAL
    assert (game.home_score, game.away_score) == (27, 20)
    assert game.start_time_raw == "2024-09-08T17:00Z"


def test_natural_key_includes_the_game_date() -> None:
    session = _make_session()
    store = EventStore(session, game_date_timezone="America/New_York")

    result = store.upsert_events(
        [
            _event(),
            _event(start_time=datetime(2025, 9, 7, 17, 0, tzinfo=UTC)),
            _event(league=LeagueEnum.NBA),
        ]
    )

    assert result == StoreResult(seen=3, created=3, updated=0, skipped=0)
    assert session.execute(sa.select(sa.func.count()).select_from(Game)).scalar_one() == 3


def test_game_date_uses_the_configured_zone() -> None:
    session = _make_session()
    late = _event(start_time=datetime(2024, 9, 9, 0, 20, tzinfo=UTC))  # 20:20 ET on the 8th

    assert EventStore(session, game_date_timezone="America/New_York").game_date_for(late) == date(
        2024, 9, 8
    )
    assert EventStore(session, game_date_timezone="UTC").game_date_for(late) == date(2024, 9, 9)


def test_team_links_resolve_by_league_and_name_or_stay_null() -> None:
    session = _make_session()
    chiefs = Team(league=LeagueEnum.NFL, name="Kansas City Chiefs", abbreviation="KC")
    # Same name in another league must not be linked.
    decoy = Team(league=LeagueEnum.NBA, name="Baltimore Ravens", abbreviation="BAL")
    session.add_all([chiefs, decoy])
    session.flush()

    store = EventStore(session, game_date_timezone="America/New_York")
    store.upsert_event(_event())

    game = session.execute(sa.select(Game)).scalar_one()
    assert game.home_team_id == chiefs.id
    assert game.away_team_id is None
    assert game.home_team_ref is chiefs
    assert game.away_team == "Baltimore Ravens"


def test_event_without_external_id_is_skipped() -> None:
    session = _make_session()
    store = EventStore(session, game_date_timezone="America/New_York")

    result = store.upsert_events([_event(external_id=""), _event()])

    assert result == StoreResult(seen=2, created=1, updated=0, skipped=1)


def test_canonical_event_normalizes_time_and_scores() -> None:
    naive = CanonicalEvent(
        external_id="1",
        league=LeagueEnum.MLB,
        status=GameStatusEnum.LIVE,
        start_time=datetime(2024, 7, 4, 23, 5),
        home_score=-3,
        away_score="4",  # type: ignore[arg-type]
    )

    assert naive.start_time == datetime(2024, 7, 4, 23, 5, tzinfo=UTC)
    assert naive.start_time_iso == "2024-07-04T23:05:00Z"
    assert (naive.home_score, naive.away_score) == (0, 4)
