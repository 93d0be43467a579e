from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker


@dataclass(frozen=True)
class DatabaseConfig:
    database_url: str
    echo: bool = False


def _serialize_sqlite_writers(engine: Engine) -> None:
    """Let SQLAlchemy own transactions so savepoints work and writers queue on the lock."""

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(cfg: DatabaseConfig) -> Engine:
    connect_args: dict[str, Any] = {}
    sqlite = cfg.database_url.startswith("sqlite")
    if sqlite:
        # Ingestion jobs hand sessions to worker threads.
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = 30
    engine = create_engine(
        cfg.database_url, echo=cfg.echo, pool_pre_ping=True, connect_args=connect_args
    )
    if sqlite:
        _serialize_sqlite_writers(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
