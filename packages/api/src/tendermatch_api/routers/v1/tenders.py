"""Upstream tender passthrough."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from tendermatch_api.dependencies import get_tender_proxy
from tendermatch_api.responses import error_body
from tendermatch_api.services.tender_proxy import TenderProxy, UpstreamError

router = APIRouter(prefix="/tenders", tags=["tenders"])


@router.get("")
async def list_tenders(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=1000),
    search: str | None = Query(None),
    date_from: str | None = Query(None, alias="dateFrom"),
    date_to: str | None = Query(None, alias="dateTo"),
    proxy: TenderProxy = Depends(get_tender_proxy),
):
    try:
        return await proxy.fetch(
            {
                "page": page,
                "limit": limit,
                "search": search,
                "dateFrom": date_from,
                "dateTo": date_to,
            }
        )
    except UpstreamError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc), details=exc.details, error="Failed to fetch tenders"),
        )
