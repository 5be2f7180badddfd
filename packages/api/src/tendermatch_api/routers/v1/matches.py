"""
Match endpoints.

POST /v1/matches runs (or re-reads from the session cache) a match for the
caller's bearer token and returns the first view. GET /v1/matches re-reads
the current session without reloading, which is how a client picks up AI
results that landed after the POST returned.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from tendermatch_shared.config import Settings
from tendermatch_shared.constants import SortKey
from tendermatch_shared.models.matching import FilterState

from tendermatch_engine.errors import InvalidDateRangeError, ProfileUnavailableError
from tendermatch_engine.pipelines.session import MatchSession, default_window

from tendermatch_api.dependencies import get_sessions, get_settings, require_token
from tendermatch_api.responses import wrap_page
from tendermatch_api.services.match_sessions import SessionRegistry

router = APIRouter(prefix="/matches", tags=["matches"])

PATH = "/v1/matches"


class MatchRequest(BaseModel):
    date_from: str | None = None
    date_to: str | None = None
    filters: FilterState = Field(default_factory=FilterState.for_matches)
    page: int = Field(default=1, ge=1)
    wait_for_ai: bool = False

    @field_validator("filters", mode="before")
    @classmethod
    def match_defaults(cls, v: object) -> object:
        if isinstance(v, dict):
            return FilterState.for_matches(**v)
        return v


def _session_meta(session: MatchSession) -> dict:
    info = session.cache_info()
    return {
        "ai_summary": session.summary,
        "ai_pending": session.ai_pending,
        "ai_analyzed": len(session.ai),
        "progress": session.progress,
        "records_scanned": len(session.records),
        "from_cache": session.from_cache,
        "cache": info.model_dump() if info else None,
    }


@router.post("")
async def run_matches(
    body: MatchRequest,
    token: str = Depends(require_token),
    sessions: SessionRegistry = Depends(get_sessions),
    settings: Settings = Depends(get_settings),
):
    default_from, default_to = default_window(settings.lookback_days)
    date_from = body.date_from or default_from
    date_to = body.date_to or default_to

    session = sessions.get(token)
    try:
        await session.refresh(date_from, date_to)
    except InvalidDateRangeError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except ProfileUnavailableError as exc:
        raise HTTPException(status_code=502, detail=str(exc))

    if body.wait_for_ai:
        await session.wait_for_ai()

    return wrap_page(
        session.view(body.filters, body.page),
        PATH,
        source="match",
        extra={"date_from": date_from, "date_to": date_to, **_session_meta(session)},
    )


@router.get("")
async def view_matches(
    keywords: str = Query(""),
    province: str | None = Query(None),
    category: str | None = Query(None),
    status: str | None = Query(None),
    closing_before: date | None = Query(None),
    min_score: int = Query(0, ge=0),
    sort_key: SortKey = Query("score-desc"),
    page: int = Query(1, ge=1),
    token: str = Depends(require_token),
    sessions: SessionRegistry = Depends(get_sessions),
):
    session = sessions.get(token)
    state = FilterState.for_matches(
        keywords=keywords,
        province=province,
        category=category,
        status=status,
        closing_before=closing_before,
        min_score=min_score,
        sort_key=sort_key,
    )
    return wrap_page(
        session.view(state, page),
        PATH,
        {
            "keywords": keywords or None,
            "province": province,
            "category": category,
            "status": status,
            "closing_before": closing_before,
            "min_score": min_score or None,
            "sort_key": sort_key,
        },
        source="match",
        extra=_session_meta(session),
    )
