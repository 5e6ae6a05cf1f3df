from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from quotedesk.cache import Clock


@dataclass
class FailureRecord:
    symbol: str
    consecutive_failures: int = 0
    window_start: float = 0.0


class FailureTracker:
    """Per-symbol circuit breaker for the primary price source.

    After ``threshold`` consecutive primary failures the symbol is routed to
    the secondary source. The breaker closes again on a primary success, or
    when ``window_seconds`` have passed since the first failure of the streak.
    """

    def __init__(
        self,
        threshold: int = 5,
        window_seconds: float = 5 * 60 * 60,
        clock: Clock = time.time,
    ) -> None:
        self._threshold = threshold
        self._window_seconds = window_seconds
        self._clock = clock
        self._records: dict[str, FailureRecord] = {}
        self._lock = threading.Lock()

    def should_bypass_primary(self, symbol: str) -> bool:
        with self._lock:
            record = self._records.get(symbol)
            if record is None:
                return False
            now = self._clock()
            if now - record.window_start > self._window_seconds:
                record.consecutive_failures = 0
                record.window_start = now
                return False
            return record.consecutive_failures >= self._threshold

    def record_failure(self, symbol: str) -> None:
        with self._lock:
            now = self._clock()
            record = self._records.get(symbol)
            if record is None:
                record = FailureRecord(symbol=symbol, window_start=now)
                self._records[symbol] = record
            if record.consecutive_failures == 0:
                record.window_start = now
            record.consecutive_failures += 1

    def record_success(self, symbol: str) -> None:
        with self._lock:
            record = self._records.get(symbol)
            if record is None:
                return
            record.consecutive_failures = 0
            record.window_start = self._clock()

    def failure_count(self, symbol: str) -> int:
        with self._lock:
            record = self._records.get(symbol)
            return record.consecutive_failures if record else 0
