from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date

import typer
from sqlalchemy.orm import Session, sessionmaker

from today_sports.core.config import settings
from today_sports.db import DatabaseConfig, create_db_engine, create_session_factory
from today_sports.db.enums import LeagueEnum


def make_session_factory() -> sessionmaker[Session]:
    engine = create_db_engine(
        DatabaseConfig(database_url=settings.database_url, echo=settings.db_echo)
    )
    return create_session_factory(engine)


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Context-managed DB session for CLI commands.
    Ensures proper close and rolls back on exception.
    """
    session = make_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def parse_day(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}") from e


def parse_leagues(values: list[str] | None) -> list[LeagueEnum]:
    if not values:
        return list(LeagueEnum)
    try:
        return [LeagueEnum(v.upper()) for v in values]
    except ValueError as e:
        raise typer.BadParameter(f"Unknown league in {values!r}") from e
