"""Private (user-entered) tender endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from tendermatch_shared.config import Settings
from tendermatch_shared.constants import SortKey
from tendermatch_shared.models.matching import FilterState
from tendermatch_shared.models.procurement import PrivateTenderDraft, PrivateTenderUpdate

from tendermatch_engine.errors import RecordNotFoundError
from tendermatch_engine.loaders.private_tenders import PrivateTenderStore
from tendermatch_engine.transforms import filtering

from tendermatch_api.dependencies import get_settings, get_store
from tendermatch_api.responses import wrap_page, wrap_response

router = APIRouter(prefix="/private-tenders", tags=["private-tenders"])

PATH = "/v1/private-tenders"


@router.get("")
async def list_private_tenders(
    keywords: str = Query(""),
    province: str | None = Query(None),
    category: str | None = Query(None),
    status: str | None = Query(None),
    closing_before: date | None = Query(None),
    sort_key: SortKey = Query("recently-added"),
    page: int = Query(1, ge=1),
    store: PrivateTenderStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    state = FilterState(
        keywords=keywords,
        province=province,
        category=category,
        status=status,
        closing_before=closing_before,
        sort_key=sort_key,
    )
    records = await store.list()
    view = filtering.paginate(filtering.apply(records, state), page, settings.page_size)
    return wrap_page(
        view,
        PATH,
        {
            "keywords": keywords or None,
            "province": province,
            "category": category,
            "status": status,
            "closing_before": closing_before,
            "sort_key": sort_key,
        },
        source="private",
    )


@router.post("", status_code=201)
async def create_private_tender(
    draft: PrivateTenderDraft,
    store: PrivateTenderStore = Depends(get_store),
):
    record = await store.create(draft)
    return wrap_response(record.model_dump(mode="json"), source="private")


@router.patch("/{ocid}")
async def update_private_tender(
    ocid: str,
    changes: PrivateTenderUpdate,
    store: PrivateTenderStore = Depends(get_store),
):
    try:
        record = await store.update(ocid, changes)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Private tender not found")
    return wrap_response(record.model_dump(mode="json"), source="private")


@router.delete("/{ocid}", status_code=204)
async def delete_private_tender(
    ocid: str,
    store: PrivateTenderStore = Depends(get_store),
) -> Response:
    await store.delete(ocid)
    return Response(status_code=204)
