from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, date, datetime

import httpx
import structlog
from sqlalchemy.orm import Session, sessionmaker

from today_sports.aggregation.cache import (
    PERSISTED_NAMESPACE,
    TODAY_NAMESPACE,
    CacheKey,
    EventCache,
    InMemoryEventCache,
)
from today_sports.core.config import Settings
from today_sports.core.timewindow import TodayWindow, resolve_today_window
from today_sports.db.models.core.game import Game
from today_sports.db.repos.core.game_repo import GameRepository
from today_sports.ingestion.providers.base.adapter import ScheduleSource
from today_sports.ingestion.providers.base.types import CanonicalEvent, SourceFetch
from today_sports.ingestion.providers.sources import build_default_registry

logger = structlog.get_logger(__name__)


def event_from_game(game: Game) -> CanonicalEvent:
    return CanonicalEvent(
        external_id=game.external_id,
        league=game.league,
        status=game.status,
        start_time=game.start_time_utc,
        start_time_raw=game.start_time_raw,
        venue=game.venue,
        venue_timezone=game.venue_timezone,
        home_team=game.home_team or "",
        away_team=game.away_team or "",
        home_score=game.home_score or 0,
        away_score=game.away_score or 0,
        link=game.link,
    )


def sort_events(events: Sequence[CanonicalEvent]) -> list[CanonicalEvent]:
    # Every start_time_iso is zero-padded UTC, so string order is time order.
    return sorted(events, key=lambda e: e.start_time_iso)


class TodayEventsService:
    """
    "Today's events" for any timezone.

    Live view: read-through cache over all schedule sources (short TTL).
    Persisted view: read-through cache over stored games (long TTL).
    """

    def __init__(
        self,
        sources: Sequence[ScheduleSource],
        cache: EventCache,
        *,
        session_factory: sessionmaker[Session] | None = None,
        default_timezone: str = "America/New_York",
        live_ttl_s: float = 60.0,
        persisted_ttl_s: float = 3600.0,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.sources = list(sources)
        self.cache = cache
        self.session_factory = session_factory
        self.default_timezone = default_timezone
        self.live_ttl_s = live_ttl_s
        self.persisted_ttl_s = persisted_ttl_s
        self._now = now or (lambda: datetime.now(tz=UTC))

    def close(self) -> None:
        for source in self.sources:
            source.close()

    def window(self, timezone: str | None = None, day: date | None = None) -> TodayWindow:
        return resolve_today_window(timezone or self.default_timezone, day, now=self._now())

    # -----------------------------
    # Live aggregation
    # -----------------------------

    def _fetch_all(self, window: TodayWindow) -> list[SourceFetch]:
        if not self.sources:
            return []
        # Sources are independent; a slow or failing one must not hold up the others.
        with ThreadPoolExecutor(max_workers=len(self.sources)) as pool:
            futures = [
                pool.submit(source.fetch_result, window.local_date, window.timezone)
                for source in self.sources
            ]
            return [f.result() for f in futures]

    def collect(self, window: TodayWindow) -> list[CanonicalEvent]:
        """Fetch every source, keep events inside the window, sort by start."""

        merged: list[CanonicalEvent] = []
        failed: list[str] = []
        for fetched in self._fetch_all(window):
            if fetched.failed:
                failed.append(fetched.league.value)
            merged.extend(e for e in fetched.events if window.contains(e.start_time))

        if failed:
            logger.warning(
                "partial_aggregation",
                date=window.local_date.isoformat(),
                timezone=window.timezone,
                failed_leagues=failed,
            )
        return sort_events(merged)

    def get_today_events(
        self, timezone: str | None = None, day: date | None = None
    ) -> list[CanonicalEvent]:
        window = self.window(timezone, day)
        key = str(CacheKey(TODAY_NAMESPACE, window.local_date, window.timezone))

        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        events = self.collect(window)
        self.cache.set(key, tuple(events), self.live_ttl_s)
        logger.info(
            "today_events_aggregated",
            date=window.local_date.isoformat(),
            timezone=window.timezone,
            events=len(events),
        )
        return events

    # -----------------------------
    # Persisted view
    # -----------------------------

    def get_persisted_events(
        self, timezone: str | None = None, day: date | None = None
    ) -> list[CanonicalEvent]:
        if self.session_factory is None:
            raise RuntimeError("TodayEventsService has no session_factory for stored games.")

        window = self.window(timezone, day)
        key = str(CacheKey(PERSISTED_NAMESPACE, window.local_date, window.timezone))

        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        session = self.session_factory()
        try:
            games = GameRepository(session).list_starting_between(
                window.start_utc, window.end_utc
            )
            events = sort_events([event_from_game(g) for g in games])
        finally:
            session.close()

        self.cache.set(key, tuple(events), self.persisted_ttl_s)
        return events

    # -----------------------------
    # Invalidation
    # -----------------------------

    def refresh_cache(self, day: date, timezone: str) -> None:
        """Evict the cached views of exactly this (date, timezone) pair."""

        for namespace in (TODAY_NAMESPACE, PERSISTED_NAMESPACE):
            evicted = self.cache.evict(str(CacheKey(namespace, day, timezone)))
            logger.info(
                "cache_evicted",
                namespace=namespace,
                date=day.isoformat(),
                timezone=timezone,
                evicted=evicted,
            )


def build_today_events_service(
    cfg: Settings,
    *,
    cache: EventCache | None = None,
    session_factory: sessionmaker[Session] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> TodayEventsService:
    registry = build_default_registry(cfg, transport=transport)
    return TodayEventsService(
        registry.create_all(),
        cache if cache is not None else InMemoryEventCache(),
        session_factory=session_factory,
        default_timezone=cfg.default_timezone,
        live_ttl_s=cfg.live_cache_ttl_s,
        persisted_ttl_s=cfg.persisted_cache_ttl_s,
    )
