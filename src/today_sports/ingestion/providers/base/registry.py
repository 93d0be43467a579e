from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from today_sports.db.enums import LeagueEnum

from .adapter import ScheduleSource
from .errors import ProviderCapabilityError


@dataclass(frozen=True)
class AdapterKey:
    provider: str
    league: LeagueEnum


SourceFactory = Callable[[], ScheduleSource]


class AdapterRegistry:
    """Fixed set of schedule sources, at most one per league."""

    def __init__(self) -> None:
        self._factories: dict[AdapterKey, SourceFactory] = {}

    def register(self, key: AdapterKey, factory: SourceFactory) -> None:
        if any(k.league == key.league for k in self._factories):
            raise ValueError(f"Duplicate source registration for league: {key.league.value}")
        self._factories[key] = factory

    def leagues(self) -> list[LeagueEnum]:
        return [k.league for k in self._factories]

    def get(self, league: LeagueEnum) -> ScheduleSource:
        for key, factory in self._factories.items():
            if key.league == league:
                return factory()
        raise ProviderCapabilityError(f"No schedule source registered for league={league.value}")

    def create_all(self) -> list[ScheduleSource]:
        return [factory() for factory in self._factories.values()]
