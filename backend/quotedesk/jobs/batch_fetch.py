from __future__ import annotations

import asyncio
from typing import Sequence

import structlog

from quotedesk.providers.selector import QuoteFetcher
from quotedesk.schemas.quote import QuoteResult, SymbolRequest

logger = structlog.get_logger(__name__)


class BatchOrchestrator:
    def __init__(self, fetcher: QuoteFetcher) -> None:
        self._fetcher = fetcher

    async def fetch_batch(self, requests: Sequence[SymbolRequest]) -> dict[str, QuoteResult]:
        """Fetch every symbol concurrently and return one entry per input symbol.

        A symbol whose fetch raises gets an all-null entry; the batch itself
        never raises for upstream failures.
        """
        outcomes = await asyncio.gather(
            *(self._fetcher.fetch_quote(request) for request in requests),
            return_exceptions=True,
        )

        results: dict[str, QuoteResult] = {}
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, Exception):
                logger.error(
                    "symbol_fetch_failed",
                    symbol=request.symbol,
                    exchange=request.exchange,
                    error=repr(outcome),
                )
                outcome = QuoteResult.unavailable(request.symbol)
            elif isinstance(outcome, BaseException):
                raise outcome
            results[request.symbol] = outcome
        return results
