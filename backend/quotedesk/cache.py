from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

Clock = Callable[[], float]


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: float


def make_cache_key(kind: str, symbol: str, exchange: str) -> str:
    return f"{kind}_{symbol}_{exchange}"


class TTLCache:
    """In-memory key/value store with per-entry expiry.

    Expired entries are dropped lazily when they are looked up.
    """

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def put(self, key: str, value: Any, ttl_seconds: float) -> None:
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl_seconds)
        with self._lock:
            self._entries[key] = entry

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
