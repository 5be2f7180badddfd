"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tendermatch_shared.config import Settings
from tendermatch_shared.db import create_supabase_client

from tendermatch_engine.loaders.private_tenders import PrivateTenderStore

from tendermatch_api.services.match_sessions import SessionRegistry
from tendermatch_api.services.tender_proxy import TenderProxy

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_tender_proxy(request: Request) -> TenderProxy:
    settings: Settings = request.app.state.settings
    return TenderProxy(
        request.app.state.http,
        settings.tenders_upstream_url,
        timeout=settings.http_timeout_s,
        max_attempts=settings.upstream_max_attempts,
    )


def get_store(request: Request) -> PrivateTenderStore:
    state = request.app.state
    if state.supabase is None:
        state.supabase = create_supabase_client(state.settings, service_role=True)
    return PrivateTenderStore(state.supabase)


def get_sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def require_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    """The caller's opaque bearer token; forwarded to the profile service as-is."""
    if credentials is None or not credentials.credentials.strip():
        raise HTTPException(
            status_code=401,
            detail="Bearer token required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials.strip()
