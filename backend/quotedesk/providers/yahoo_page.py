from __future__ import annotations

from typing import Mapping
from urllib.parse import quote

from bs4 import BeautifulSoup

from quotedesk.config.settings import ProviderSettings
from quotedesk.errors import SourceUnavailable
from quotedesk.providers.http import fetch_text
from quotedesk.providers.markets import market_symbol

SOURCE_NAME = "yahoo_page"

_PRICE_SELECTOR = '[data-testid="qsp-price"]'


def parse_quote_page(html: str, symbol: str) -> float:
    soup = BeautifulSoup(html, "html.parser")
    node = soup.select_one(_PRICE_SELECTOR)
    if node is None:
        raise SourceUnavailable(SOURCE_NAME, symbol, "price element missing")
    text = node.get_text(strip=True).replace(",", "")
    try:
        return float(text)
    except ValueError as exc:
        raise SourceUnavailable(SOURCE_NAME, symbol, f"unparseable price {text!r}") from exc


class YahooPageSource:
    """Primary price source: scrapes the price off the Yahoo Finance quote page."""

    name = SOURCE_NAME

    def __init__(self, config: ProviderSettings, suffixes: Mapping[str, str]) -> None:
        self._config = config
        self._suffixes = suffixes

    def fetch_price(self, symbol: str, exchange: str) -> float:
        ticker = market_symbol(symbol, exchange, self._suffixes)
        url = self._config.quote_page_url.format(symbol=quote(ticker, safe="."))
        html = fetch_text(
            url,
            source=self.name,
            symbol=symbol,
            timeout=self._config.timeout_seconds,
            user_agent=self._config.user_agent,
        )
        return parse_quote_page(html, symbol)
