from __future__ import annotations

from urllib.parse import quote

import structlog
from bs4 import BeautifulSoup

from quotedesk.config.settings import ProviderSettings
from quotedesk.providers.http import fetch_text
from quotedesk.schemas.quote import Fundamentals

logger = structlog.get_logger(__name__)

SOURCE_NAME = "google_finance"


def _parse_number(text: str | None) -> float | None:
    if not text:
        return None
    cleaned = text.strip().replace("$", "").replace(",", "")
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_fundamentals_page(html: str) -> Fundamentals:
    soup = BeautifulSoup(html, "html.parser")
    pe_ratio = None
    earnings = None
    for row in soup.select("div.gyFHrc"):
        label_node = row.select_one(".mfs7Fc")
        if label_node is None:
            continue
        label = label_node.get_text(strip=True)
        if pe_ratio is None and "P/E ratio" in label:
            value = row.select_one(".P6K39c")
            pe_ratio = _parse_number(value.get_text() if value else None)
        elif earnings is None and "EPS" in label:
            value = row.select_one(".jNipjJ")
            earnings = _parse_number(value.get_text() if value else None)
    return Fundamentals(pe_ratio=pe_ratio, earnings=earnings)


class GoogleFinanceSource:
    """Best-effort P/E and EPS scraped from the Google Finance quote page.

    Never raises: any failure degrades to an all-null ``Fundamentals``.
    """

    name = SOURCE_NAME

    def __init__(self, config: ProviderSettings) -> None:
        self._config = config

    def fetch_fundamentals(self, symbol: str, exchange: str) -> Fundamentals:
        url = self._config.fundamentals_page_url.format(
            symbol=quote(symbol, safe="."), exchange=quote(exchange)
        )
        try:
            html = fetch_text(
                url,
                source=self.name,
                symbol=symbol,
                timeout=self._config.timeout_seconds,
                user_agent=self._config.user_agent,
            )
            return parse_fundamentals_page(html)
        except Exception as exc:
            logger.warning(
                "fundamentals_unavailable",
                symbol=symbol,
                exchange=exchange,
                error=str(exc),
            )
            return Fundamentals()
