"""
sources/tenders.py — Paged reader for the procurement data source.

Calls GET {tenders_source_url}?page&limit&dateFrom&dateTo, which by default is
this project's own /v1/tenders proxy in front of the eTenders OCDS API.

Response shapes accepted (see transforms.normalize.extract_results):
  {"results": [...], "total": 1234}
  {"data": [...]}
  {"releases": [...], "totalReleases": 1234}
  [...]

No retries here: a failed page is reported as SourceError and the
progressive loader decides what to do with it.

Usage:
    async with httpx.AsyncClient() as http:
        source = TenderSource(http, settings.tenders_source_url)
        page = await source.fetch_page(1, 50, "2026-09-19", "2026-10-19")
        page.records, page.total
"""

from __future__ import annotations

from typing import NamedTuple

import httpx

from tendermatch_shared.models.procurement import ProcurementRecord

from tendermatch_engine.errors import SourceError
from tendermatch_engine.sources.base import BaseSource
from tendermatch_engine.transforms.normalize import extract_results, extract_total, normalize_many


class TenderPage(NamedTuple):
    records: list[ProcurementRecord]
    total: int | None
    raw_count: int


class TenderSource(BaseSource):
    """Fetches and normalizes one page of upstream tenders at a time."""

    name = "tenders"

    def __init__(self, http: httpx.AsyncClient, url: str, *, timeout: float = 30.0) -> None:
        super().__init__(http, timeout=timeout)
        self._url = url.rstrip("/")

    async def fetch_page(
        self,
        page: int,
        limit: int,
        date_from: str | None = None,
        date_to: str | None = None,
        *,
        search: str | None = None,
    ) -> TenderPage:
        """
        Fetch page *page* (1-indexed) of *limit* records.

        raw_count is the number of records the upstream returned before
        id-less ones were dropped; the loader uses it to detect the last page.

        Raises:
            SourceError: network failure, non-2xx status, or a body that is
                neither JSON nor one of the accepted shapes.
        """
        params: dict[str, str | int] = {"page": page, "limit": limit}
        if date_from:
            params["dateFrom"] = date_from
        if date_to:
            params["dateTo"] = date_to
        if search:
            params["search"] = search

        try:
            payload = await self._get_json(self._url, params=params)
        except httpx.HTTPStatusError as exc:
            raise SourceError(
                f"tender source returned {exc.response.status_code}", page=page
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceError(f"tender source unreachable: {exc}", page=page) from exc
        except ValueError as exc:
            raise SourceError("tender source returned non-JSON body", page=page) from exc

        if not isinstance(payload, (dict, list)):
            raise SourceError(
                f"unexpected payload type {type(payload).__name__}", page=page
            )

        raws = extract_results(payload)
        records = normalize_many(raws)
        total = extract_total(payload)
        self._log.info(
            "tender_page_fetched",
            page=page,
            limit=limit,
            rows=len(records),
            total=total,
        )
        return TenderPage(records=records, total=total, raw_count=len(raws))
