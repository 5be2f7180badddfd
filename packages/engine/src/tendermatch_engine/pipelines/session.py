"""
pipelines/session.py — One user's match session: load, score, view, augment.

Ties the engine together for a single bearer token:

    refresh(date_from, date_to)
      1. validate the window (InvalidDateRangeError)
      2. fetch the profile (ProfileUnavailableError, fatal)
      3. session cache hit -> score cached records
         miss             -> progressive load, re-scoring after every batch,
                             then cache the completed set
      4. start the AI overlay as a background task (cache hit or not)

    view(filter_state, page)  -> Page[MatchResult] with AI fields merged

Every refresh takes a new generation number. Batches, cache writes and AI
results that belong to an older generation are dropped, so a slow stale
load can never overwrite a newer one.

Usage:
    async with httpx.AsyncClient() as http:
        session = build_session(http, token, settings)
        await session.refresh("2026-09-19", "2026-10-19")
        page = session.view(FilterState.for_matches(province="Gauteng"))
        await session.wait_for_ai()
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, MutableMapping, Sequence
from datetime import date, timedelta
from typing import Any

import httpx
import structlog

from tendermatch_shared.config import Settings
from tendermatch_shared.config import settings as default_settings
from tendermatch_shared.constants import PAGE_SIZE
from tendermatch_shared.models.matching import AIMatch, CacheInfo, FilterState, MatchResult, Page
from tendermatch_shared.models.procurement import ProcurementRecord

from tendermatch_engine.errors import InvalidDateRangeError
from tendermatch_engine.pipelines.ai_overlay import AIOverlay
from tendermatch_engine.pipelines.progressive import CancellationToken, ProgressiveLoader
from tendermatch_engine.sources.profile import ProfileClient, StaticCredentials
from tendermatch_engine.sources.reasoning import ReasoningClient
from tendermatch_engine.sources.tenders import TenderSource
from tendermatch_engine.transforms import filtering
from tendermatch_engine.transforms.profile import ResolvedProfile
from tendermatch_engine.transforms.scoring import score_all
from tendermatch_engine.utils.cache import SessionCache

log = structlog.get_logger(__name__)

UpdateCallback = Callable[["MatchSession"], None]


def validate_range(date_from: str, date_to: str) -> tuple[date, date]:
    """
    Parse and check a YYYY-MM-DD window.

    Raises:
        InvalidDateRangeError: a bound is missing or malformed, or from > to.
    """
    try:
        start = date.fromisoformat(date_from)
        end = date.fromisoformat(date_to)
    except (TypeError, ValueError) as exc:
        raise InvalidDateRangeError(
            f"Dates must be YYYY-MM-DD (got {date_from!r}, {date_to!r})"
        ) from exc
    if start > end:
        raise InvalidDateRangeError("Start date must be on or before the end date")
    return start, end


def default_window(lookback_days: int = 30, *, today: date | None = None) -> tuple[str, str]:
    """The last *lookback_days* days up to today, as ISO strings."""
    end = today or date.today()
    start = end - timedelta(days=lookback_days)
    return start.isoformat(), end.isoformat()


class MatchSession:
    def __init__(
        self,
        profile_client: ProfileClient,
        loader: ProgressiveLoader,
        cache: SessionCache,
        overlay: AIOverlay,
        *,
        page_size: int = PAGE_SIZE,
    ) -> None:
        self._profile_client = profile_client
        self._loader = loader
        self._cache = cache
        self._overlay = overlay
        self.page_size = page_size

        self._generation = 0
        self._token: CancellationToken | None = None
        self._ai_task: asyncio.Task[None] | None = None

        self.profile: dict[str, Any] | None = None
        self.records: list[ProcurementRecord] = []
        self.matches: list[MatchResult] = []
        self.ai: dict[str, AIMatch] = {}
        self.summary: str | None = None
        self.progress: float = 0.0
        self.loading = False
        self.from_cache = False

    # ------------------------------------------------------------------
    # Generations
    # ------------------------------------------------------------------

    def _begin(self) -> int:
        self._generation += 1
        if self._token is not None:
            self._token.cancel()
        self._token = None
        if self._ai_task is not None and not self._ai_task.done():
            self._ai_task.cancel()
        self._ai_task = None
        self.ai = {}
        self.summary = None
        self.progress = 0.0
        return self._generation

    def _current(self, generation: int) -> bool:
        return generation == self._generation

    def _rescore(self, records: Sequence[ProcurementRecord]) -> None:
        self.records = list(records)
        self.matches = score_all(self.records, ResolvedProfile.from_raw(self.profile or {}))

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(
        self,
        date_from: str,
        date_to: str,
        on_update: UpdateCallback | None = None,
    ) -> list[MatchResult]:
        """
        Reload (or re-read from cache) and re-score for [date_from, date_to].

        Returns the deterministic matches, best first. If a newer refresh
        starts while this one is waiting, this one returns quietly with
        whatever the session currently holds.

        Raises:
            InvalidDateRangeError: the window is malformed or inverted.
            ProfileUnavailableError: the profile could not be fetched.
        """
        validate_range(date_from, date_to)
        generation = self._begin()
        refresh_log = log.bind(generation=generation, date_from=date_from, date_to=date_to)
        refresh_log.info("refresh_start")

        def notify() -> None:
            if on_update is not None and self._current(generation):
                on_update(self)

        self.loading = True
        try:
            profile = await self._profile_client.fetch()
        except Exception:
            if self._current(generation):
                self.loading = False
            raise
        if not self._current(generation):
            return self.matches
        self.profile = profile

        cached = self._cache.get(date_from, date_to)
        if cached is not None:
            self.from_cache = True
            self._rescore(cached)
            self.progress = 1.0
            self.loading = False
            refresh_log.info("refresh_from_cache", records=len(cached), matches=len(self.matches))
            notify()
        else:
            self.from_cache = False
            token = CancellationToken()
            self._token = token

            def on_batch(merged: Sequence[ProcurementRecord], fraction: float) -> None:
                if not self._current(generation):
                    return
                self._rescore(merged)
                self.progress = fraction
                notify()

            records = await self._loader.load(date_from, date_to, on_batch, token=token)
            if token.cancelled or not self._current(generation):
                refresh_log.info("refresh_superseded")
                return self.matches

            self._rescore(records)
            self.progress = 1.0
            self.loading = False
            self._token = None
            failed = list(self._loader.failed_pages)
            if records and not failed:
                self._cache.put(records, date_from, date_to)
            else:
                # A partial or empty load must not be served on the next retry.
                refresh_log.warning("refresh_not_cached", records=len(records), failed_pages=failed)
            refresh_log.info("refresh_loaded", records=len(records), matches=len(self.matches))
            notify()

        if self._overlay.enabled and self.matches:
            self._ai_task = asyncio.create_task(
                self._run_ai(generation, list(self.matches), profile, notify)
            )
        return self.matches

    async def _run_ai(
        self,
        generation: int,
        matches: list[MatchResult],
        profile: dict[str, Any],
        notify: Callable[[], None],
    ) -> None:
        def publish() -> None:
            try:
                notify()
            except Exception as exc:
                log.warning("ai_update_callback_failed", generation=generation, error=str(exc))

        def on_result(record_id: str, ai: AIMatch) -> None:
            if self._current(generation):
                self.ai[record_id] = ai
                publish()

        await self._overlay.enhance(matches, profile, on_result)
        summary = await self._overlay.summarize(matches, profile)
        if self._current(generation):
            self.summary = summary
            publish()

    async def wait_for_ai(self) -> None:
        """Block until the current AI pass (if any) has finished or been cancelled."""
        task = self._ai_task
        if task is not None:
            await asyncio.wait({task})

    def cancel(self) -> None:
        """Abandon any in-flight load and AI pass."""
        self._begin()
        self.loading = False

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def merged_matches(self) -> list[MatchResult]:
        """Current matches with the AI side map applied."""
        return [m.with_ai(self.ai.get(m.id)) for m in self.matches]

    def view(self, state: FilterState | None = None, page: int = 1) -> Page[MatchResult]:
        """Filter, sort and paginate the current matches."""
        state = state or FilterState.for_matches()
        return filtering.paginate(
            filtering.apply(self.merged_matches(), state), page, self.page_size
        )

    @property
    def ai_pending(self) -> bool:
        return self._ai_task is not None and not self._ai_task.done()

    def cache_info(self) -> CacheInfo | None:
        return self._cache.info()


def build_session(
    http: httpx.AsyncClient,
    token: str | None,
    settings: Settings | None = None,
    *,
    storage: MutableMapping[str, str] | None = None,
    reasoning: ReasoningClient | None = None,
) -> MatchSession:
    """
    Wire a MatchSession from settings.

    The httpx client is owned by the caller. *storage* backs the session
    cache (a plain dict by default). *reasoning* overrides the client built
    from settings; pass one explicitly to share it across sessions.
    """
    cfg = settings or default_settings
    source = TenderSource(http, cfg.tenders_source_url, timeout=cfg.http_timeout_s)
    loader = ProgressiveLoader(
        source,
        first_batch_size=cfg.first_batch_size,
        batch_size=cfg.batch_size,
        batch_delay_s=cfg.batch_delay_s,
        max_records=cfg.max_records,
    )
    profile_client = ProfileClient(
        http,
        cfg.profile_service_url,
        StaticCredentials(token),
        timeout=cfg.http_timeout_s,
    )
    overlay = AIOverlay(
        reasoning if reasoning is not None else ReasoningClient.from_settings(cfg),
        max_records=cfg.ai_max_records,
        call_delay_s=cfg.ai_call_delay_s,
    )
    return MatchSession(
        profile_client,
        loader,
        SessionCache(cfg.cache_ttl_s, storage=storage),
        overlay,
        page_size=cfg.page_size,
    )
