from __future__ import annotations

from typing import Protocol

from quotedesk.schemas.quote import Fundamentals


class PriceSource(Protocol):
    """A single upstream that can quote a current price.

    ``fetch_price`` raises ``SourceUnavailable`` when the upstream fails or
    returns nothing that parses into a price.
    """

    name: str

    def fetch_price(self, symbol: str, exchange: str) -> float: ...


class FundamentalsSource(Protocol):
    """Best-effort P/E and EPS lookup; degrades to nulls instead of raising."""

    name: str

    def fetch_fundamentals(self, symbol: str, exchange: str) -> Fundamentals: ...
