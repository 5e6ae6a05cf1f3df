from __future__ import annotations

import time
from dataclasses import dataclass

from quotedesk.cache import Clock, TTLCache
from quotedesk.config.settings import Settings
from quotedesk.failures import FailureTracker
from quotedesk.jobs.batch_fetch import BatchOrchestrator
from quotedesk.providers.google_finance import GoogleFinanceSource
from quotedesk.providers.selector import QuoteFetcher
from quotedesk.providers.yahoo_page import YahooPageSource
from quotedesk.providers.yahoo_quote import YahooQuoteSource


@dataclass
class QuoteContext:
    cache: TTLCache
    tracker: FailureTracker
    fetcher: QuoteFetcher
    orchestrator: BatchOrchestrator


def build_context(settings: Settings, clock: Clock = time.time) -> QuoteContext:
    """Wire the process-wide cache, breaker and sources into one fetch pipeline."""
    cache = TTLCache(clock=clock)
    tracker = FailureTracker(
        threshold=settings.failures.threshold,
        window_seconds=settings.failures.window_seconds,
        clock=clock,
    )
    fetcher = QuoteFetcher(
        cache,
        tracker,
        primary=YahooPageSource(settings.providers, settings.exchange_suffixes),
        secondary=YahooQuoteSource(settings.providers, settings.exchange_suffixes),
        fundamentals=GoogleFinanceSource(settings.providers),
        cache_ttl_seconds=settings.cache_ttl_seconds,
        timeout_seconds=settings.providers.timeout_seconds,
    )
    return QuoteContext(
        cache=cache,
        tracker=tracker,
        fetcher=fetcher,
        orchestrator=BatchOrchestrator(fetcher),
    )
