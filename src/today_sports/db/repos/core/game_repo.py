from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from today_sports.db.enums import LeagueEnum
from today_sports.db.models.core.game import Game
from today_sports.db.repos.base import BaseRepository


class GameRepository(BaseRepository[Game]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Game)

    def find_by_natural_key(
        self, league: LeagueEnum, external_id: str, game_date: date
    ) -> Game | None:
        return self.first_where(
            Game.league == league,
            Game.external_id == external_id,
            Game.game_date == game_date,
        )

    def list_starting_between(self, start_utc: datetime, end_utc: datetime) -> list[Game]:
        """Games with start_time_utc in [start_utc, end_utc), earliest first."""

        stmt = (
            select(Game)
            .where(Game.start_time_utc >= start_utc, Game.start_time_utc < end_utc)
            .order_by(Game.start_time_utc, Game.id)
        )
        return list(self.session.execute(stmt).scalars().all())
