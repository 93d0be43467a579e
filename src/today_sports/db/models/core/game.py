from __future__ import annotations

from datetime import date, datetime

import sqlalchemy as sa
from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from today_sports.db.base import Base, TimestampMixin
from today_sports.db.enums import GameStatusEnum, LeagueEnum


def _enum_values(enum_cls: type) -> list[str]:
    return [e.value for e in enum_cls]


class Game(Base, TimestampMixin):
    __tablename__ = "games"

    id: Mapped[int] = mapped_column(primary_key=True)

    league: Mapped[LeagueEnum] = mapped_column(
        sa.Enum(LeagueEnum, name="leagueenum", values_callable=_enum_values),
        nullable=False,
    )
    external_id: Mapped[str] = mapped_column(String, nullable=False)
    # Provider ids repeat across seasons, so the local date is part of identity.
    game_date: Mapped[date] = mapped_column(Date, nullable=False)

    start_time_utc: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    start_time_raw: Mapped[str | None] = mapped_column(String, nullable=True)

    status: Mapped[GameStatusEnum] = mapped_column(
        sa.Enum(GameStatusEnum, name="gamestatusenum", values_callable=_enum_values),
        nullable=False,
        default=GameStatusEnum.SCHEDULED,
        server_default=GameStatusEnum.SCHEDULED.value,
    )
    venue: Mapped[str | None] = mapped_column(String, nullable=True)
    venue_timezone: Mapped[str | None] = mapped_column(String, nullable=True)

    home_team: Mapped[str] = mapped_column(String, nullable=False, default="")
    away_team: Mapped[str] = mapped_column(String, nullable=False, default="")

    home_team_id: Mapped[int | None] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    away_team_id: Mapped[int | None] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )

    home_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    away_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    link: Mapped[str | None] = mapped_column(String, nullable=True)

    home_team_ref: Mapped[Team | None] = relationship(
        back_populates="home_games", foreign_keys=[home_team_id]
    )
    away_team_ref: Mapped[Team | None] = relationship(
        back_populates="away_games", foreign_keys=[away_team_id]
    )

    __table_args__ = (
        UniqueConstraint(
            "league", "external_id", "game_date", name="uq_games_league_external_id_game_date"
        ),
        CheckConstraint("home_score >= 0", name="home_score_non_negative"),
        CheckConstraint("away_score >= 0", name="away_score_non_negative"),
        Index("ix_games_league_game_date", "league", "game_date"),
        Index("ix_games_start_time_utc", "start_time_utc"),
        Index("ix_games_home_team_id", "home_team_id"),
        Index("ix_games_away_team_id", "away_team_id"),
    )


from today_sports.db.models.core.team import Team  # noqa: E402
