from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status

from quotedesk.cache import make_cache_key
from quotedesk.config.settings import Settings, settings as default_settings
from quotedesk.context import QuoteContext
from quotedesk.providers.selector import FUNDAMENTALS_KIND, PRICE_KIND
from quotedesk.schemas.quote import StockDataRequest, StockDataResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


def get_context(request: Request) -> QuoteContext:
    return request.app.state.quotes


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", default_settings)


def _normalize_code(value: str) -> str:
    return value.strip().upper()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.post("/stocks", response_model=StockDataResponse)
async def stock_data_endpoint(
    payload: StockDataRequest,
    context: QuoteContext = Depends(get_context),
    app_settings: Settings = Depends(get_settings),
) -> StockDataResponse:
    if not payload.symbols:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid or missing symbols array"},
        )

    limited = payload.symbols[: app_settings.max_batch_symbols]
    stock_data = await context.orchestrator.fetch_batch(limited)
    return StockDataResponse(stock_data=stock_data)


@router.delete("/cache")
def clear_cache(context: QuoteContext = Depends(get_context)) -> dict:
    context.cache.clear()
    logger.info("cache_cleared")
    return {"status": "cleared"}


@router.delete("/cache/{exchange}/{symbol}")
def invalidate_symbol(
    exchange: str, symbol: str, context: QuoteContext = Depends(get_context)
) -> dict:
    exchange = _normalize_code(exchange)
    symbol = _normalize_code(symbol)
    for kind in (PRICE_KIND, FUNDAMENTALS_KIND):
        context.cache.invalidate(make_cache_key(kind, symbol, exchange))
    logger.info("cache_invalidated", symbol=symbol, exchange=exchange)
    return {"status": "invalidated", "symbol": symbol, "exchange": exchange}
