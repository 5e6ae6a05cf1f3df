from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class FailureSettings(BaseModel):
    threshold: int = 5
    window_seconds: float = 5 * 60 * 60


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTEDESK_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )
    quote_page_url: str = "https://finance.yahoo.com/quote/{symbol}"
    quote_api_url: str = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"
    fundamentals_page_url: str = "https://www.google.com/finance/quote/{symbol}:{exchange}"
    timeout_seconds: float = 10.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTEDESK_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cache_ttl_seconds: int = Field(
        default=300,
        validation_alias=AliasChoices("CACHE_TTL_SECONDS", "QUOTEDESK_CACHE_TTL_SECONDS"),
    )
    max_batch_symbols: int = Field(
        default=50,
        validation_alias=AliasChoices("MAX_BATCH_SYMBOLS", "QUOTEDESK_MAX_BATCH_SYMBOLS"),
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "QUOTEDESK_LOG_LEVEL"),
    )

    exchange_suffixes: Dict[str, str] = Field(
        default_factory=lambda: {"NSE": "NS", "BSE": "BO"}
    )
    failures: FailureSettings = Field(default_factory=FailureSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)


settings = Settings()
