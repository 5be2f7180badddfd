"""
FastAPI application factory.

Serve with:
    uvicorn tendermatch_api.app:app --port 8000
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from supabase import Client

from tendermatch_shared import __version__
from tendermatch_shared.config import Settings
from tendermatch_shared.config import settings as default_settings

from tendermatch_engine.sources.reasoning import ReasoningClient
from tendermatch_engine.utils.logging import configure_logging

from tendermatch_api.middleware.logging import LoggingMiddleware
from tendermatch_api.routers.health import router as health_router
from tendermatch_api.routers.v1 import v1_router
from tendermatch_api.services.match_sessions import SessionRegistry

logger = structlog.get_logger()


def create_app(
    settings: Settings | None = None,
    *,
    http: httpx.AsyncClient | None = None,
    supabase: Client | None = None,
    reasoning: ReasoningClient | None = None,
) -> FastAPI:
    """
    Build the app. Clients passed in are used as-is and not closed here;
    anything not passed is built from *settings* (supabase lazily, on the
    first private-tender request).
    """
    cfg = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(cfg.log_level, cfg.log_format)
        owned = app.state.http is None
        if owned:
            app.state.http = httpx.AsyncClient(timeout=cfg.http_timeout_s)
        app.state.sessions = SessionRegistry(
            cfg,
            app.state.http,
            reasoning=reasoning if reasoning is not None else ReasoningClient.from_settings(cfg),
        )
        logger.info("app_started", ai_enabled=cfg.ai_enabled)
        try:
            yield
        finally:
            app.state.sessions.clear()
            if owned:
                await app.state.http.aclose()
                app.state.http = None

    app = FastAPI(
        title="tendermatch API",
        description="Tender discovery and matching API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.http = http
    app.state.supabase = supabase

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    # Routers
    app.include_router(health_router)
    app.include_router(v1_router)

    logger.info("app_created", cors_origins=cfg.cors_origins_list)
    return app


app = create_app()
