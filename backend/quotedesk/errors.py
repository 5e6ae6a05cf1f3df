from __future__ import annotations


class QuoteDeskError(Exception):
    pass


class SourceUnavailable(QuoteDeskError):
    """Raised when a single upstream call fails or returns nothing usable."""

    def __init__(self, source: str, symbol: str, reason: str) -> None:
        super().__init__(f"{source} unavailable for {symbol}: {reason}")
        self.source = source
        self.symbol = symbol
        self.reason = reason


class BothSourcesUnavailable(QuoteDeskError):
    """Raised when no price source produced a price for a symbol this round."""

    def __init__(
        self, symbol: str, exchange: str, errors: list[SourceUnavailable]
    ) -> None:
        reasons = "; ".join(str(error) for error in errors)
        super().__init__(f"No price for {symbol} ({exchange}): {reasons}")
        self.symbol = symbol
        self.exchange = exchange
        self.errors = errors
