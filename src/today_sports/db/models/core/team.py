from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from today_sports.db.base import Base, TimestampMixin
from today_sports.db.enums import LeagueEnum


class Team(Base, TimestampMixin):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)

    league: Mapped[LeagueEnum] = mapped_column(
        sa.Enum(
            LeagueEnum,
            name="leagueenum",
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
        ),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    abbreviation: Mapped[str] = mapped_column(String(10), nullable=False)
    logo_url: Mapped[str | None] = mapped_column(String, nullable=True)

    # Hex colors, e.g. "#FF4C00".
    primary_color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    secondary_color: Mapped[str | None] = mapped_column(String(7), nullable=True)

    home_games: Mapped[list[Game]] = relationship(
        back_populates="home_team_ref",
        foreign_keys="Game.home_team_id",
    )
    away_games: Mapped[list[Game]] = relationship(
        back_populates="away_team_ref",
        foreign_keys="Game.away_team_id",
    )

    __table_args__ = (
        UniqueConstraint("league", "name", name="uq_teams_league_name"),
        Index("ix_teams_league", "league"),
    )


from today_sports.db.models.core.game import Game  # noqa: E402
