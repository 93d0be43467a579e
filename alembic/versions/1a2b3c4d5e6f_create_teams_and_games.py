"""Create teams and games

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "1a2b3c4d5e6f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LEAGUES = ("NHL", "NBA", "MLB", "NFL")
STATUSES = ("scheduled", "live", "final")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("league", sa.Enum(*LEAGUES, name="leagueenum"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("abbreviation", sa.String(length=10), nullable=False),
        sa.Column("logo_url", sa.String(), nullable=True),
        sa.Column("primary_color", sa.String(length=7), nullable=True),
        sa.Column("secondary_color", sa.String(length=7), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_teams"),
        sa.UniqueConstraint("league", "name", name="uq_teams_league_name"),
    )
    op.create_index("ix_teams_league", "teams", ["league"], unique=False)

    op.create_table(
        "games",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "league",
            postgresql.ENUM(*LEAGUES, name="leagueenum", create_type=False),
            nullable=False,
        ),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("game_date", sa.Date(), nullable=False),
        sa.Column("start_time_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("start_time_raw", sa.String(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(*STATUSES, name="gamestatusenum"),
            server_default="scheduled",
            nullable=False,
        ),
        sa.Column("venue", sa.String(), nullable=True),
        sa.Column("venue_timezone", sa.String(), nullable=True),
        sa.Column("home_team", sa.String(), nullable=False),
        sa.Column("away_team", sa.String(), nullable=False),
        sa.Column("home_team_id", sa.Integer(), nullable=True),
        sa.Column("away_team_id", sa.Integer(), nullable=True),
        sa.Column("home_score", sa.Integer(), server_default="0", nullable=False),
        sa.Column("away_score", sa.Integer(), server_default="0", nullable=False),
        sa.Column("link", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("home_score >= 0", name="ck_games_home_score_non_negative"),
        sa.CheckConstraint("away_score >= 0", name="ck_games_away_score_non_negative"),
        sa.ForeignKeyConstraint(
            ["home_team_id"],
            ["teams.id"],
            name="fk_games_home_team_id_teams",
            ondelete="SET NULL",
        ),
        sa.ForeignKeyConstraint(
            ["away_team_id"],
            ["teams.id"],
            name="fk_games_away_team_id_teams",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_games"),
        sa.UniqueConstraint(
            "league",
            "external_id",
            "game_date",
            name="uq_games_league_external_id_game_date",
        ),
    )
    op.create_index("ix_games_league_game_date", "games", ["league", "game_date"], unique=False)
    op.create_index("ix_games_start_time_utc", "games", ["start_time_utc"], unique=False)
    op.create_index("ix_games_home_team_id", "games", ["home_team_id"], unique=False)
    op.create_index("ix_games_away_team_id", "games", ["away_team_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_games_away_team_id", table_name="games")
    op.drop_index("ix_games_home_team_id", table_name="games")
    op.drop_index("ix_games_start_time_utc", table_name="games")
    op.drop_index("ix_games_league_game_date", table_name="games")
    op.drop_table("games")
    op.drop_index("ix_teams_league", table_name="teams")
    op.drop_table("teams")
    sa.Enum(name="gamestatusenum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="leagueenum").drop(op.get_bind(), checkfirst=True)
