from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SymbolRequest(_CamelModel):
    symbol: str
    exchange: str = ""

    @field_validator("symbol", "exchange")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def key(self) -> str:
        return f"{self.symbol}_{self.exchange}"


class Fundamentals(_CamelModel):
    pe_ratio: Optional[float] = None
    earnings: Optional[float] = None


class QuoteResult(_CamelModel):
    symbol: str
    current_price: Optional[float] = None
    pe_ratio: Optional[float] = None
    earnings: Optional[float] = None

    @classmethod
    def unavailable(cls, symbol: str) -> QuoteResult:
        return cls(symbol=symbol)


class StockDataRequest(_CamelModel):
    symbols: list[SymbolRequest] = Field(default_factory=list)


class StockDataResponse(_CamelModel):
    stock_data: dict[str, QuoteResult] = Field(default_factory=dict)
