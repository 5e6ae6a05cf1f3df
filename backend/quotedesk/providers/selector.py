from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from quotedesk.cache import TTLCache, make_cache_key
from quotedesk.errors import BothSourcesUnavailable, SourceUnavailable
from quotedesk.failures import FailureTracker
from quotedesk.providers.interfaces import FundamentalsSource, PriceSource
from quotedesk.schemas.quote import Fundamentals, QuoteResult, SymbolRequest

logger = structlog.get_logger(__name__)

PRICE_KIND = "price"
FUNDAMENTALS_KIND = "financial"


@dataclass
class PriceAttempt:
    source: str
    price: float | None = None
    error: SourceUnavailable | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.price is not None


class QuoteFetcher:
    """Fetches price and fundamentals for one symbol.

    Price: cache, then the primary source unless its breaker is open, then the
    secondary source. Only a primary success closes the breaker. Fundamentals
    come from their own source, are cached even when empty and never fall back.
    """

    def __init__(
        self,
        cache: TTLCache,
        tracker: FailureTracker,
        primary: PriceSource,
        secondary: PriceSource,
        fundamentals: FundamentalsSource,
        *,
        cache_ttl_seconds: float = 300,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._cache = cache
        self._tracker = tracker
        self._primary = primary
        self._secondary = secondary
        self._fundamentals = fundamentals
        self._cache_ttl_seconds = cache_ttl_seconds
        self._timeout_seconds = timeout_seconds

    async def _attempt(self, source: PriceSource, request: SymbolRequest) -> PriceAttempt:
        try:
            price = await asyncio.wait_for(
                asyncio.to_thread(source.fetch_price, request.symbol, request.exchange),
                timeout=self._timeout_seconds,
            )
        except SourceUnavailable as exc:
            return PriceAttempt(source=source.name, error=exc)
        except TimeoutError:
            return PriceAttempt(
                source=source.name,
                error=SourceUnavailable(source.name, request.symbol, "timeout"),
            )
        except Exception as exc:
            return PriceAttempt(
                source=source.name,
                error=SourceUnavailable(source.name, request.symbol, repr(exc)),
            )
        return PriceAttempt(source=source.name, price=price)

    def _store_price(self, cache_key: str, price: float) -> float:
        self._cache.put(cache_key, price, self._cache_ttl_seconds)
        return price

    async def fetch_price(self, request: SymbolRequest) -> float:
        cache_key = make_cache_key(PRICE_KIND, request.symbol, request.exchange)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        attempts: list[PriceAttempt] = []
        if self._tracker.should_bypass_primary(request.key):
            logger.info(
                "primary_source_bypassed",
                symbol=request.symbol,
                exchange=request.exchange,
                source=self._primary.name,
            )
        else:
            primary = await self._attempt(self._primary, request)
            if primary.ok:
                self._tracker.record_success(request.key)
                return self._store_price(cache_key, primary.price)
            self._tracker.record_failure(request.key)
            logger.warning(
                "primary_source_failed",
                symbol=request.symbol,
                exchange=request.exchange,
                source=primary.source,
                error=str(primary.error),
            )
            attempts.append(primary)

        secondary = await self._attempt(self._secondary, request)
        if secondary.ok:
            return self._store_price(cache_key, secondary.price)
        attempts.append(secondary)

        raise BothSourcesUnavailable(
            request.symbol,
            request.exchange,
            [attempt.error for attempt in attempts if attempt.error is not None],
        )

    async def fetch_fundamentals(self, request: SymbolRequest) -> Fundamentals:
        cache_key = make_cache_key(FUNDAMENTALS_KIND, request.symbol, request.exchange)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            fundamentals = await asyncio.wait_for(
                asyncio.to_thread(
                    self._fundamentals.fetch_fundamentals, request.symbol, request.exchange
                ),
                timeout=self._timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "fundamentals_timeout",
                symbol=request.symbol,
                exchange=request.exchange,
                source=self._fundamentals.name,
            )
            fundamentals = Fundamentals()

        self._cache.put(cache_key, fundamentals, self._cache_ttl_seconds)
        return fundamentals

    async def fetch_quote(self, request: SymbolRequest) -> QuoteResult:
        price, fundamentals = await asyncio.gather(
            self.fetch_price(request),
            self.fetch_fundamentals(request),
            return_exceptions=True,
        )
        if isinstance(price, Exception):
            logger.warning(
                "price_unavailable",
                symbol=request.symbol,
                exchange=request.exchange,
                error=str(price) if isinstance(price, BothSourcesUnavailable) else repr(price),
            )
            price = None
        elif isinstance(price, BaseException):
            raise price
        if isinstance(fundamentals, BaseException):
            raise fundamentals

        return QuoteResult(
            symbol=request.symbol,
            current_price=price,
            pe_ratio=fundamentals.pe_ratio,
            earnings=fundamentals.earnings,
        )
