"""
pipelines/progressive.py — Progressive multi-batch tender loader.

Splits a date window into one fast first batch, delivered immediately, and
then sequential background batches separated by a fixed delay:

    page 1 (limit=first_batch_size)  -> on_batch(merged, fraction)
    sleep(batch_delay_s)
    page 2 (limit=batch_size)        -> on_batch(merged, fraction)
    ...

How many background pages run:
  - upstream reported a total: pages up to min(total, max_records)
  - no total: keep going until a short page or max_records

Batches are appended in fetch order with no de-duplication (upstream pages
are disjoint). A failed batch is logged and skipped; the load carries on.

Cancellation: starting a new load cancels the previous load's token. A
cancelled load stops at its next suspension point, never calls on_batch
again, and returns what it had without raising.

Usage:
    loader = ProgressiveLoader(TenderSource(http, url))
    records = await loader.load("2026-09-19", "2026-10-19", on_batch=render)
"""

from __future__ import annotations

import asyncio
import math
import time
from collections.abc import Awaitable, Callable, Sequence

import structlog

from tendermatch_shared.constants import BATCH_DELAY_S, BATCH_SIZE, FIRST_BATCH_SIZE
from tendermatch_shared.models.procurement import ProcurementRecord

from tendermatch_engine.errors import SourceError
from tendermatch_engine.sources.tenders import TenderPage, TenderSource

log = structlog.get_logger(__name__)

BatchCallback = Callable[[Sequence[ProcurementRecord], float], None]
Sleep = Callable[[float], Awaitable[None]]

MAX_RECORDS = 500


class CancellationToken:
    """Flag shared between a load and whoever may abandon it."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ProgressiveLoader:
    def __init__(
        self,
        source: TenderSource,
        *,
        first_batch_size: int = FIRST_BATCH_SIZE,
        batch_size: int = BATCH_SIZE,
        batch_delay_s: float = BATCH_DELAY_S,
        max_records: int = MAX_RECORDS,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if batch_size < 1 or first_batch_size < 1:
            raise ValueError("batch sizes must be positive")
        if first_batch_size % batch_size:
            # Page numbers for the background batches are computed in units of
            # batch_size, so the first batch must cover whole pages.
            raise ValueError("first_batch_size must be a multiple of batch_size")
        self._source = source
        self.first_batch_size = first_batch_size
        self.batch_size = batch_size
        self.batch_delay_s = batch_delay_s
        self.max_records = max_records
        self._sleep = sleep
        self._active: CancellationToken | None = None
        # Pages (in batch_size units) that failed during the most recent load.
        self.failed_pages: list[int] = []

    def cancel(self) -> None:
        """Cancel the in-flight load, if any."""
        if self._active is not None:
            self._active.cancel()

    async def _fetch(
        self,
        page: int,
        limit: int,
        date_from: str,
        date_to: str,
    ) -> TenderPage | None:
        try:
            return await self._source.fetch_page(page, limit, date_from, date_to)
        except SourceError as exc:
            log.warning("batch_failed", page=page, limit=limit, error=str(exc))
            return None

    def _planned_pages(self, total: int | None) -> int:
        """Last page number (in batch_size units) this load will request."""
        target = self.max_records if total is None else min(total, self.max_records)
        return max(1, math.ceil(target / self.batch_size))

    async def load(
        self,
        date_from: str,
        date_to: str,
        on_batch: BatchCallback | None = None,
        *,
        token: CancellationToken | None = None,
    ) -> list[ProcurementRecord]:
        """
        Load every batch for [date_from, date_to] and return the merged list.

        Never raises for batch failures; an all-failed load returns [].
        Pages that failed are left in ``failed_pages`` afterwards.
        """
        self.cancel()
        token = token or CancellationToken()
        self._active = token

        merged: list[ProcurementRecord] = []
        failed: list[int] = []
        self.failed_pages = failed
        t0 = time.monotonic()

        def deliver(fraction: float) -> None:
            if on_batch is not None and not token.cancelled:
                on_batch(list(merged), fraction)

        # -- first batch ------------------------------------------------------
        first = await self._fetch(1, self.first_batch_size, date_from, date_to)
        if token.cancelled:
            log.info("load_cancelled", after_page=1, rows=len(merged))
            return merged

        total: int | None = None
        if first is None:
            failed.append(1)
        else:
            merged.extend(first.records)
            total = first.total

        next_page = self.first_batch_size // self.batch_size + 1
        last_page = self._planned_pages(total)
        exhausted = first is not None and (
            first.raw_count < self.first_batch_size or len(merged) >= self.max_records
        )
        if total is not None and total <= self.first_batch_size:
            exhausted = True

        batches_total = 1 + max(0, last_page - next_page + 1)
        finished = exhausted or next_page > last_page
        deliver(1.0 if finished else 1 / batches_total)
        log.info(
            "first_batch_loaded",
            rows=len(merged),
            total=total,
            planned_batches=batches_total,
        )

        # -- background batches -----------------------------------------------
        page = next_page
        done = 1
        while not finished:
            await self._sleep(self.batch_delay_s)
            if token.cancelled:
                break

            result = await self._fetch(page, self.batch_size, date_from, date_to)
            if token.cancelled:
                break

            done += 1
            if result is None:
                failed.append(page)
            else:
                merged.extend(result.records)

            short_page = result is not None and result.raw_count < self.batch_size
            finished = (
                page >= last_page
                or len(merged) >= self.max_records
                or (total is None and short_page)
            )
            deliver(1.0 if finished else min(1.0, done / batches_total))
            log.debug("batch_loaded", page=page, rows=len(merged))
            page += 1

        if token.cancelled:
            log.info("load_cancelled", after_page=page, rows=len(merged))
            return merged

        if self._active is token:
            self._active = None
        log.info(
            "load_complete",
            rows=len(merged),
            batches=done,
            failed_pages=failed,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return merged
