"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

from tendermatch_shared import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "ok", "version": __version__}


@router.get("/ready")
async def ready(request: Request) -> dict:
    settings = request.app.state.settings
    return {
        "status": "ready",
        "ai_enabled": settings.ai_enabled,
        "upstream": settings.tenders_upstream_url,
    }
