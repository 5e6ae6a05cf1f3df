from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from quotedesk.api.routes import router
from quotedesk.config.logging_config import configure_logging
from quotedesk.config.settings import Settings, settings as default_settings
from quotedesk.context import build_context


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(app_settings.log_level)
        app.state.settings = app_settings
        app.state.quotes = build_context(app_settings)
        yield

    app = FastAPI(title="quotedesk", version="0.1.0", lifespan=lifespan)
    app.include_router(router)
    return app


app = create_app()
