from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

from quotedesk.config.settings import ProviderSettings
from quotedesk.errors import SourceUnavailable
from quotedesk.providers.http import fetch_json
from quotedesk.providers.markets import market_symbol

SOURCE_NAME = "yahoo_quote"


def parse_chart_payload(payload: Any, symbol: str) -> float:
    if not isinstance(payload, dict):
        raise SourceUnavailable(SOURCE_NAME, symbol, "unexpected payload")
    chart = payload.get("chart") or {}
    if not isinstance(chart, dict):
        raise SourceUnavailable(SOURCE_NAME, symbol, "unexpected payload")
    if chart.get("error"):
        raise SourceUnavailable(SOURCE_NAME, symbol, f"api error: {chart['error']}")
    results = chart.get("result") or []
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        raise SourceUnavailable(SOURCE_NAME, symbol, "empty result")

    meta = results[0].get("meta") or {}
    if not isinstance(meta, dict):
        raise SourceUnavailable(SOURCE_NAME, symbol, "unexpected payload")

    price = meta.get("regularMarketPrice")
    if isinstance(price, bool) or not isinstance(price, (int, float)) or price <= 0:
        raise SourceUnavailable(SOURCE_NAME, symbol, "no market price")
    return float(price)


class YahooQuoteSource:
    """Secondary price source backed by the Yahoo Finance chart API."""

    name = SOURCE_NAME

    def __init__(self, config: ProviderSettings, suffixes: Mapping[str, str]) -> None:
        self._config = config
        self._suffixes = suffixes

    def fetch_price(self, symbol: str, exchange: str) -> float:
        ticker = market_symbol(symbol, exchange, self._suffixes)
        url = self._config.quote_api_url.format(symbol=quote(ticker, safe="."))
        payload = fetch_json(
            url,
            source=self.name,
            symbol=symbol,
            timeout=self._config.timeout_seconds,
            user_agent=self._config.user_agent,
        )
        return parse_chart_payload(payload, symbol)
