"""
Ingestion units of work.

Each unit is an immutable task message plus an idempotent handler. Units
share no in-memory state; concurrent writers only meet at the games table's
natural-key upsert, so any unit can be re-run or retried wholesale.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol, TypeVar

import structlog
from sqlalchemy.orm import Session, sessionmaker

from today_sports.db.enums import LeagueEnum
from today_sports.ingestion.providers.base.registry import AdapterRegistry
from today_sports.ingestion.providers.base.types import CanonicalEvent
from today_sports.ingestion.store import EventStore, StoreResult

logger = structlog.get_logger(__name__)

T = TypeVar("T")


# -----------------------------
# Task messages
# -----------------------------


@dataclass(frozen=True)
class FetchLeagueDateTask:
    league: LeagueEnum
    day: date
    timezone: str


@dataclass(frozen=True)
class StoreEventsChunkTask:
    events: tuple[CanonicalEvent, ...]
    chunk_index: int = 0


@dataclass(frozen=True)
class JobOutcome:
    name: str
    result: StoreResult | None = None
    error: str | None = None
    source_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# -----------------------------
# Dispatchers
# -----------------------------


class TaskDispatcher(Protocol):
    def submit(self, fn: Callable[[], T]) -> Future[T]:
        ...

    def shutdown(self) -> None:
        ...


class InlineDispatcher:
    """Runs each unit immediately on the calling thread."""

    def submit(self, fn: Callable[[], T]) -> Future[T]:
        future: Future[T] = Future()
        try:
            future.set_result(fn())
        except Exception as e:  # surfaced through the future, like an executor
            future.set_exception(e)
        return future

    def shutdown(self) -> None:
        return None


@dataclass
class ThreadPoolDispatcher:
    """
    Bounded worker pool with at-least-once execution: a unit that raises is
    re-run up to `max_attempts` times before its future fails.
    """

    max_workers: int = 4
    max_attempts: int = 2
    _executor: ThreadPoolExecutor = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="ingest"
        )

    def _run(self, fn: Callable[[], T]) -> T:
        attempt = 0
        while True:
            attempt += 1
            try:
                return fn()
            except Exception as e:
                if attempt >= self.max_attempts:
                    raise
                logger.warning("job_retry", attempt=attempt, error=str(e))

    def submit(self, fn: Callable[[], T]) -> Future[T]:
        return self._executor.submit(self._run, fn)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> ThreadPoolDispatcher:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


# -----------------------------
# Handlers
# -----------------------------


def _write_events(
    session_factory: sessionmaker[Session],
    events: Iterable[CanonicalEvent],
    *,
    game_date_timezone: str,
) -> StoreResult:
    session = session_factory()
    try:
        result = EventStore(session, game_date_timezone=game_date_timezone).upsert_events(events)
        session.commit()
        return result
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def handle_fetch_league_date(
    task: FetchLeagueDateTask,
    *,
    registry: AdapterRegistry,
    session_factory: sessionmaker[Session],
    game_date_timezone: str,
) -> JobOutcome:
    """Fetch one league for one date and upsert every event."""

    name = f"fetch:{task.league.value}:{task.day.isoformat()}"
    source = registry.get(task.league)
    try:
        fetched = source.fetch_result(task.day, task.timezone)
    finally:
        source.close()

    result = _write_events(
        session_factory, fetched.events, game_date_timezone=game_date_timezone
    )
    logger.info(
        "league_date_ingested",
        job=name,
        seen=result.seen,
        created=result.created,
        updated=result.updated,
        skipped=result.skipped,
        source_error=fetched.error,
    )
    return JobOutcome(name=name, result=result, source_error=fetched.error)


def handle_store_events_chunk(
    task: StoreEventsChunkTask,
    *,
    session_factory: sessionmaker[Session],
    game_date_timezone: str,
) -> JobOutcome:
    """Replay one chunk of pre-fetched events through the store."""

    name = f"chunk:{task.chunk_index}"
    result = _write_events(session_factory, task.events, game_date_timezone=game_date_timezone)
    logger.info(
        "events_chunk_ingested",
        job=name,
        seen=result.seen,
        created=result.created,
        updated=result.updated,
        skipped=result.skipped,
    )
    return JobOutcome(name=name, result=result)


# -----------------------------
# Dispatch helpers
# -----------------------------


def chunk_events(
    events: Sequence[CanonicalEvent], size: int
) -> list[StoreEventsChunkTask]:
    if size <= 0:
        raise ValueError("chunk size must be positive")
    return [
        StoreEventsChunkTask(events=tuple(events[i : i + size]), chunk_index=n)
        for n, i in enumerate(range(0, len(events), size))
    ]


def dispatch_date_jobs(
    dispatcher: TaskDispatcher,
    *,
    registry: AdapterRegistry,
    session_factory: sessionmaker[Session],
    day: date,
    timezone: str,
    game_date_timezone: str,
    leagues: Sequence[LeagueEnum] | None = None,
) -> list[tuple[str, Future[JobOutcome]]]:
    """Submit one independent unit per league for `day`."""

    futures: list[tuple[str, Future[JobOutcome]]] = []
    for league in leagues or registry.leagues():
        task = FetchLeagueDateTask(league=league, day=day, timezone=timezone)
        futures.append(
            (
                f"fetch:{league.value}:{day.isoformat()}",
                dispatcher.submit(
                    lambda task=task: handle_fetch_league_date(
                        task,
                        registry=registry,
                        session_factory=session_factory,
                        game_date_timezone=game_date_timezone,
                    )
                ),
            )
        )
    return futures


def dispatch_season_chunks(
    dispatcher: TaskDispatcher,
    events: Sequence[CanonicalEvent],
    *,
    session_factory: sessionmaker[Session],
    game_date_timezone: str,
    chunk_size: int,
) -> list[tuple[str, Future[JobOutcome]]]:
    """Split a pre-fetched season into bounded chunks, one unit each."""

    futures: list[tuple[str, Future[JobOutcome]]] = []
    for task in chunk_events(events, chunk_size):
        futures.append(
            (
                f"chunk:{task.chunk_index}",
                dispatcher.submit(
                    lambda task=task: handle_store_events_chunk(
                        task,
                        session_factory=session_factory,
                        game_date_timezone=game_date_timezone,
                    )
                ),
            )
        )
    return futures


@dataclass(frozen=True)
class IngestSummary:
    outcomes: list[JobOutcome]

    @property
    def totals(self) -> StoreResult:
        total = StoreResult()
        for outcome in self.outcomes:
            if outcome.result is not None:
                total = total + outcome.result
        return total

    @property
    def failed(self) -> list[JobOutcome]:
        return [o for o in self.outcomes if not o.ok]


def collect_results(futures: Sequence[tuple[str, Future[JobOutcome]]]) -> IngestSummary:
    """Wait for every unit; a failed unit is recorded, never re-raised."""

    outcomes: list[JobOutcome] = []
    for name, future in futures:
        try:
            outcomes.append(future.result())
        except Exception as e:
            logger.error("job_failed", job=name, error=str(e))
            outcomes.append(JobOutcome(name=name, error=f"{type(e).__name__}: {e}"))
    return IngestSummary(outcomes=outcomes)
