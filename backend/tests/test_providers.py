import io
from http.client import IncompleteRead, RemoteDisconnected
from unittest.mock import patch
from urllib.error import HTTPError, URLError

import pytest

from quotedesk.config.settings import ProviderSettings
from quotedesk.errors import SourceUnavailable
from quotedesk.providers import google_finance, yahoo_page, yahoo_quote
from quotedesk.providers.google_finance import GoogleFinanceSource, parse_fundamentals_page
from quotedesk.providers.http import fetch_json, fetch_text
from quotedesk.providers.markets import market_suffix, market_symbol
from quotedesk.providers.yahoo_page import YahooPageSource, parse_quote_page
from quotedesk.providers.yahoo_quote import YahooQuoteSource, parse_chart_payload

SUFFIXES = {"NSE": "NS", "BSE": "BO"}

QUOTE_PAGE = """
<html><body>
  <section>
    <span data-testid="qsp-price">2,987.45</span>
    <span data-testid="qsp-price-change">+12.30</span>
  </section>
</body></html>
"""

FUNDAMENTALS_PAGE = """
<html><body>
  <div class="gyFHrc"><div class="mfs7Fc">Market cap</div><div class="P6K39c">20.1T INR</div></div>
  <div class="gyFHrc"><div class="mfs7Fc">P/E ratio</div><div class="P6K39c">28.75</div></div>
  <div class="gyFHrc"><div class="mfs7Fc">EPS (TTM)</div><div class="jNipjJ">$104.20</div></div>
</body></html>
"""


def _provider_settings() -> ProviderSettings:
    return ProviderSettings(timeout_seconds=1.0)


class FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def test_market_symbol_uses_exchange_suffix() -> None:
    assert market_symbol("RELIANCE", "NSE", SUFFIXES) == "RELIANCE.NS"
    assert market_symbol("RELIANCE", "bse", SUFFIXES) == "RELIANCE.BO"
    assert market_symbol("AAPL", "NASDAQ", SUFFIXES) == "AAPL"
    assert market_suffix("", SUFFIXES) == ""


def test_parse_quote_page_strips_thousands_separator() -> None:
    assert parse_quote_page(QUOTE_PAGE, "RELIANCE") == 2987.45


@pytest.mark.parametrize(
    "html",
    [
        "<html><body><p>nothing here</p></body></html>",
        '<span data-testid="qsp-price">--</span>',
    ],
)
def test_parse_quote_page_failures(html: str) -> None:
    with pytest.raises(SourceUnavailable) as excinfo:
        parse_quote_page(html, "RELIANCE")

    assert excinfo.value.source == "yahoo_page"


def test_parse_chart_payload_reads_market_price() -> None:
    payload = {"chart": {"result": [{"meta": {"regularMarketPrice": 191.5}}], "error": None}}

    assert parse_chart_payload(payload, "AAPL") == 191.5


@pytest.mark.parametrize(
    "payload",
    [
        ["not", "a", "dict"],
        {"chart": {"result": None, "error": {"code": "Not Found"}}},
        {"chart": {"result": []}},
        {"chart": {"result": [{"meta": {}}]}},
        {"chart": {"result": [{"meta": {"regularMarketPrice": None}}]}},
        {"chart": {"result": [{"meta": {"regularMarketPrice": 0}}]}},
        {"chart": "x"},
        {"chart": {"result": [{"meta": []}]}},
        {"chart": {"result": {"meta": {"regularMarketPrice": 5.0}}}},
    ],
)
def test_parse_chart_payload_without_price_is_unavailable(payload) -> None:
    with pytest.raises(SourceUnavailable):
        parse_chart_payload(payload, "AAPL")


def test_parse_fundamentals_page() -> None:
    fundamentals = parse_fundamentals_page(FUNDAMENTALS_PAGE)

    assert fundamentals.pe_ratio == 28.75
    assert fundamentals.earnings == 104.20


def test_parse_fundamentals_page_keeps_partial_values() -> None:
    html = (
        '<div class="gyFHrc"><div class="mfs7Fc">P/E ratio</div><div class="P6K39c">-</div></div>'
        '<div class="gyFHrc"><div class="mfs7Fc">EPS</div><div class="jNipjJ">$3.10</div></div>'
    )

    fundamentals = parse_fundamentals_page(html)

    assert fundamentals.pe_ratio is None
    assert fundamentals.earnings == 3.10


def test_fetch_text_converts_http_errors() -> None:
    error = HTTPError("https://example.test", 429, "Too Many Requests", {}, None)
    with patch("quotedesk.providers.http.urlopen", side_effect=error):
        with pytest.raises(SourceUnavailable) as excinfo:
            fetch_text(
                "https://example.test", source="s", symbol="AAPL", timeout=1, user_agent="ua"
            )

    assert excinfo.value.reason == "rate_limited"


def test_fetch_text_converts_network_errors() -> None:
    with patch("quotedesk.providers.http.urlopen", side_effect=URLError("refused")):
        with pytest.raises(SourceUnavailable):
            fetch_text(
                "https://example.test", source="s", symbol="AAPL", timeout=1, user_agent="ua"
            )


@pytest.mark.parametrize(
    "error",
    [
        RemoteDisconnected("Remote end closed connection without response"),
        ConnectionResetError(104, "Connection reset by peer"),
        IncompleteRead(b"partial", 100),
    ],
)
def test_fetch_text_converts_connection_errors(error) -> None:
    with patch("quotedesk.providers.http.urlopen", side_effect=error):
        with pytest.raises(SourceUnavailable) as excinfo:
            fetch_text(
                "https://example.test", source="s", symbol="AAPL", timeout=1, user_agent="ua"
            )

    assert excinfo.value.reason.startswith("connection:")


def test_fetch_text_sends_timeout_and_user_agent() -> None:
    with patch(
        "quotedesk.providers.http.urlopen", return_value=FakeResponse(b"<html></html>")
    ) as urlopen_mock:
        body = fetch_text(
            "https://example.test", source="s", symbol="AAPL", timeout=3.5, user_agent="ua/1"
        )

    assert body == "<html></html>"
    request = urlopen_mock.call_args.args[0]
    assert request.get_header("User-agent") == "ua/1"
    assert urlopen_mock.call_args.kwargs["timeout"] == 3.5


def test_fetch_json_rejects_invalid_body() -> None:
    with patch("quotedesk.providers.http.urlopen", return_value=FakeResponse(b"<html>")):
        with pytest.raises(SourceUnavailable) as excinfo:
            fetch_json(
                "https://example.test", source="s", symbol="AAPL", timeout=1, user_agent="ua"
            )

    assert excinfo.value.reason == "invalid json"


def test_yahoo_page_source_builds_suffixed_url(monkeypatch) -> None:
    seen: list[str] = []

    def fake_fetch_text(url: str, **kwargs) -> str:
        seen.append(url)
        return QUOTE_PAGE

    monkeypatch.setattr(yahoo_page, "fetch_text", fake_fetch_text)
    source = YahooPageSource(_provider_settings(), SUFFIXES)

    assert source.fetch_price("RELIANCE", "NSE") == 2987.45
    assert seen == ["https://finance.yahoo.com/quote/RELIANCE.NS"]


def test_yahoo_quote_source_builds_suffixed_url(monkeypatch) -> None:
    seen: list[str] = []

    def fake_fetch_json(url: str, **kwargs):
        seen.append(url)
        return {"chart": {"result": [{"meta": {"regularMarketPrice": 812.0}}]}}

    monkeypatch.setattr(yahoo_quote, "fetch_json", fake_fetch_json)
    source = YahooQuoteSource(_provider_settings(), SUFFIXES)

    assert source.fetch_price("SBIN", "BSE") == 812.0
    assert seen == ["https://query1.finance.yahoo.com/v8/finance/chart/SBIN.BO"]


def test_google_finance_source_uses_raw_exchange(monkeypatch) -> None:
    seen: list[str] = []

    def fake_fetch_text(url: str, **kwargs) -> str:
        seen.append(url)
        return FUNDAMENTALS_PAGE

    monkeypatch.setattr(google_finance, "fetch_text", fake_fetch_text)
    source = GoogleFinanceSource(_provider_settings())

    fundamentals = source.fetch_fundamentals("TCS", "NSE")

    assert fundamentals.pe_ratio == 28.75
    assert seen == ["https://www.google.com/finance/quote/TCS:NSE"]


def test_google_finance_source_degrades_to_nulls(monkeypatch) -> None:
    def failing_fetch_text(url: str, **kwargs) -> str:
        raise SourceUnavailable("google_finance", "TCS", "http_503")

    monkeypatch.setattr(google_finance, "fetch_text", failing_fetch_text)
    source = GoogleFinanceSource(_provider_settings())

    fundamentals = source.fetch_fundamentals("TCS", "NSE")

    assert fundamentals.pe_ratio is None
    assert fundamentals.earnings is None
