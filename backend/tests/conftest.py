import logging
import threading

import pytest
import structlog

from quotedesk.schemas.quote import Fundamentals


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePriceSource:
    """Price source double that records calls and replays a scripted outcome."""

    def __init__(self, name: str, price: float | None = None, error: Exception | None = None) -> None:
        self.name = name
        self.price = price
        self.error = error
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def fetch_price(self, symbol: str, exchange: str) -> float:
        with self._lock:
            self.calls.append((symbol, exchange))
        if self.error is not None:
            raise self.error
        return self.price


class FakeFundamentalsSource:
    def __init__(self, fundamentals: Fundamentals | None = None) -> None:
        self.name = "fake_fundamentals"
        self.fundamentals = fundamentals or Fundamentals()
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def fetch_fundamentals(self, symbol: str, exchange: str) -> Fundamentals:
        with self._lock:
            self.calls.append((symbol, exchange))
        return self.fundamentals


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def configure_structlog_for_tests():
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.root.setLevel(logging.WARNING)
    yield
