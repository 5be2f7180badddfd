"""
db.py — Supabase client factory.

Clients are built explicitly from a Settings value and handed to whoever
needs them (the private tender store, the API app state). Nothing here
holds a process-wide client.

Usage:
    from tendermatch_shared.db import create_supabase_client

    supabase = create_supabase_client(settings)                     # anon key
    supabase = create_supabase_client(settings, service_role=True)  # service key
"""

from __future__ import annotations

import structlog
from supabase import Client, create_client

from tendermatch_shared.config import Settings

logger = structlog.get_logger(__name__)


def create_supabase_client(settings: Settings, *, service_role: bool = False) -> Client:
    """
    Build a Supabase client.

    Args:
        settings:     Source of the URL and keys.
        service_role: If True, uses the service role key (full DB access).
                      If False (default), uses the anon key (RLS applies).

    Raises:
        RuntimeError: when the required key is not configured.
    """
    if service_role:
        if not settings.supabase_service_key:
            raise RuntimeError(
                "SUPABASE_SERVICE_KEY is not set. "
                "Set it in .env before using service_role=True."
            )
        key = settings.supabase_service_key
    else:
        if not settings.supabase_anon_key:
            raise RuntimeError("SUPABASE_ANON_KEY is not set. Set it in .env.")
        key = settings.supabase_anon_key

    client = create_client(settings.supabase_url, key)
    logger.info(
        "supabase_client_created",
        role="service_role" if service_role else "anon",
    )
    return client
