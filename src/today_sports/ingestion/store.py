from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from today_sports.core.timewindow import local_date_of
from today_sports.db.models.core.game import Game
from today_sports.db.repos.core.game_repo import GameRepository
from today_sports.db.repos.core.team_repo import TeamRepository
from today_sports.ingestion.providers.base.types import CanonicalEvent

logger = structlog.get_logger(__name__)


class UpsertOutcome(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class StoreResult:
    seen: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0

    def __add__(self, other: StoreResult) -> StoreResult:
        return StoreResult(
            seen=self.seen + other.seen,
            created=self.created + other.created,
            updated=self.updated + other.updated,
            skipped=self.skipped + other.skipped,
        )


class EventStore:
    """
    Idempotent writes of canonical events into `games`.

    Natural key is (league, external_id, game_date); every sighting
    overwrites the mutable fields with the latest values. Team links are a
    best-effort lookup by (league, display name) and stay NULL on a miss.
    """

    def __init__(self, session: Session, *, game_date_timezone: str) -> None:
        self.session = session
        self.game_date_timezone = game_date_timezone
        self.games = GameRepository(session)
        self.teams = TeamRepository(session)

    def game_date_for(self, event: CanonicalEvent) -> date:
        return local_date_of(event.start_time, self.game_date_timezone)

    def _changes(self, event: CanonicalEvent) -> dict[str, Any]:
        home_ref = self.teams.find_by_name(event.league, event.home_team)
        away_ref = self.teams.find_by_name(event.league, event.away_team)

        return {
            "status": event.status,
            "start_time_utc": event.start_time,
            "start_time_raw": event.start_time_raw,
            "venue": event.venue,
            "venue_timezone": event.venue_timezone,
            "home_team": event.home_team,
            "away_team": event.away_team,
            "home_team_id": home_ref.id if home_ref is not None else None,
            "away_team_id": away_ref.id if away_ref is not None else None,
            "home_score": event.home_score,
            "away_score": event.away_score,
            "link": event.link,
        }

    def upsert_event(self, event: CanonicalEvent) -> UpsertOutcome:
        if not event.external_id:
            logger.warning(
                "event_without_external_id",
                league=event.league.value,
                home_team=event.home_team,
                away_team=event.away_team,
            )
            return UpsertOutcome.SKIPPED

        game_date = self.game_date_for(event)
        changes = self._changes(event)

        existing = self.games.find_by_natural_key(event.league, event.external_id, game_date)
        if existing is not None:
            self.games.patch(existing, changes, skip_none=False)
            return UpsertOutcome.UPDATED

        try:
            with self.session.begin_nested():
                self.games.add(
                    Game(
                        league=event.league,
                        external_id=event.external_id,
                        game_date=game_date,
                        **changes,
                    )
                )
        except IntegrityError:
            # A concurrent writer inserted the same natural key first; last write wins.
            existing = self.games.find_by_natural_key(event.league, event.external_id, game_date)
            if existing is None:
                raise
            self.games.patch(existing, changes, skip_none=False)
            return UpsertOutcome.UPDATED

        return UpsertOutcome.CREATED

    def upsert_events(self, events: Iterable[CanonicalEvent]) -> StoreResult:
        counts = {outcome: 0 for outcome in UpsertOutcome}
        seen = 0
        for event in events:
            seen += 1
            counts[self.upsert_event(event)] += 1

        return StoreResult(
            seen=seen,
            created=counts[UpsertOutcome.CREATED],
            updated=counts[UpsertOutcome.UPDATED],
            skipped=counts[UpsertOutcome.SKIPPED],
        )
