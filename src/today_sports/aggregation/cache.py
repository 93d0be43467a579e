from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Protocol

TODAY_NAMESPACE = "today"
PERSISTED_NAMESPACE = "persisted"


@dataclass(frozen=True)
class CacheKey:
    namespace: str
    local_date: date
    timezone: str

    def __str__(self) -> str:
        return f"sports:{self.namespace}:{self.local_date.isoformat()}:{self.timezone}"


class EventCache(Protocol):
    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any, ttl_s: float) -> None:
        ...

    def evict(self, key: str) -> bool:
        ...


class InMemoryEventCache:
    """
    Process-local TTL cache. Each operation holds the lock, so reads and
    writes are atomic per key; loaders run outside it.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, Any]] = {}

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_s: float) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl_s, value)

    def evict(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
