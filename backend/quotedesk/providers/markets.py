from __future__ import annotations

from typing import Mapping


def market_suffix(exchange: str, suffixes: Mapping[str, str]) -> str:
    """Map an exchange code to its market suffix; unknown codes map to ""."""
    return suffixes.get(exchange.strip().upper(), "")


def market_symbol(symbol: str, exchange: str, suffixes: Mapping[str, str]) -> str:
    suffix = market_suffix(exchange, suffixes)
    return f"{symbol}.{suffix}" if suffix else symbol
