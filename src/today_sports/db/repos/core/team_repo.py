from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from today_sports.db.enums import LeagueEnum
from today_sports.db.models.core.team import Team
from today_sports.db.repos.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Team)

    def find_by_name(self, league: LeagueEnum, name: str) -> Team | None:
        if not name:
            return None
        return self.first_where(Team.league == league, Team.name == name)

    def upsert_by_name(
        self, league: LeagueEnum, name: str, changes: Mapping[str, Any]
    ) -> tuple[Team, bool]:
        """Insert or update the team keyed by (league, name). Returns (team, created)."""

        existing = self.find_by_name(league, name)
        if existing is None:
            return self.add(Team(league=league, name=name, **changes)), True
        return self.patch(existing, changes), False
