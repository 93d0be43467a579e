from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Protocol

import structlog

from today_sports.core.timewindow import TodayWindow, resolve_today_window
from today_sports.db.enums import LeagueEnum

from .client import BaseHttpClient
from .errors import ProviderError, ProviderResponseError
from .types import CanonicalEvent, SourceFetch

logger = structlog.get_logger(__name__)


class ScheduleSource(Protocol):
    """
    Aggregation and ingestion depend on this, not on any HTTP client.

    One source per league; `fetch` never raises.
    """

    league: LeagueEnum
    provider_key: str

    def fetch(self, day: date | None, timezone: str) -> list[CanonicalEvent]:
        ...

    def fetch_result(self, day: date | None, timezone: str) -> SourceFetch:
        ...

    def close(self) -> None:
        ...


@dataclass
class BaseScheduleSource(ABC):
    """
    Shared never-raise wrapper around a provider-specific `_fetch_events`.

    Upstream failures and malformed payloads become an empty result carrying
    the error message.
    """

    http: BaseHttpClient

    league: LeagueEnum
    provider_key: str = ""

    @abstractmethod
    def _fetch_events(self, window: TodayWindow) -> list[CanonicalEvent]:
        ...

    def _mapped_events(self, window: TodayWindow) -> list[CanonicalEvent]:
        try:
            return self._fetch_events(window)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ProviderResponseError(
                f"Unexpected {self.league.value} payload: {type(e).__name__}: {e}"
            ) from e

    def fetch_result(self, day: date | None, timezone: str) -> SourceFetch:
        window = resolve_today_window(timezone, day)
        try:
            events = self._mapped_events(window)
        except ProviderError as e:
            logger.warning(
                "provider_unavailable",
                league=self.league.value,
                provider=self.provider_key,
                date=window.local_date.isoformat(),
                timezone=timezone,
                error=str(e),
            )
            return SourceFetch(league=self.league, events=[], error=str(e))

        logger.debug(
            "provider_fetched",
            league=self.league.value,
            provider=self.provider_key,
            date=window.local_date.isoformat(),
            timezone=timezone,
            events=len(events),
        )
        return SourceFetch(league=self.league, events=events)

    def fetch(self, day: date | None, timezone: str) -> list[CanonicalEvent]:
        return self.fetch_result(day, timezone).events

    def close(self) -> None:
        self.http.close()
