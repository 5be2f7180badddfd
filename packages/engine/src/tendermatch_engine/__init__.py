"""
tendermatch_engine — tender matching engine for the tendermatch platform.

Architecture:
  sources/     — eTenders page source, profile service, AI reasoning client
  transforms/  — record normalization, profile probing, scoring, filter/sort
  loaders/     — Supabase-backed private tender store
  pipelines/   — progressive loader, AI overlay, match session orchestration
  utils/       — structlog configuration, session cache

Quick start:
    import httpx
    from tendermatch_engine.pipelines.session import build_session

    async with httpx.AsyncClient() as http:
        session = build_session(http, token)
        matches = await session.refresh("2026-09-19", "2026-10-19")
        page = session.view()

CLI:
    tendermatch match --token $TOKEN --min-score 20
    tendermatch browse --page 1 --limit 50

Shared code from tendermatch_shared:
    from tendermatch_shared.config import Settings, settings
    from tendermatch_shared.models import ProcurementRecord, MatchResult, FilterState
"""

__version__ = "0.1.0"
