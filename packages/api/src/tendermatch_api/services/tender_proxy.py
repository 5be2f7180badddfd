"""
services/tender_proxy.py — Passthrough to the eTenders OCDS releases API.

The upstream body is returned untouched; the engine's normalizer deals with
its shape. Only transport errors (connect/read failures, timeouts) are
retried, up to upstream_max_attempts in total. HTTP error statuses are not
retried and surface as UpstreamError carrying the upstream status and body.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from tendermatch_api.utils.retry import Sleep, upstream_retrying

log = structlog.get_logger(__name__)

# Query parameters forwarded upstream; anything else is dropped
FORWARDED_PARAMS = ("page", "limit", "search", "dateFrom", "dateTo")


class UpstreamError(Exception):
    def __init__(self, message: str, *, status_code: int = 502, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class TenderProxy:
    def __init__(
        self,
        http: httpx.AsyncClient,
        url: str,
        *,
        timeout: float = 30.0,
        max_attempts: int = 2,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._http = http
        self._url = url
        self._timeout = timeout
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def _get(self, params: dict[str, Any]) -> httpx.Response:
        async for attempt in upstream_retrying(self.max_attempts, sleep=self._sleep):
            with attempt:
                return await self._http.get(self._url, params=params, timeout=self._timeout)
        raise AssertionError("unreachable")  # reraise=True re-raises on exhaustion

    async def fetch(self, params: dict[str, Any]) -> Any:
        """
        Forward *params* upstream and return the decoded JSON body.

        Raises:
            UpstreamError: transport failure after retries, a non-2xx
                status, or a non-JSON body.
        """
        forwarded = {k: params[k] for k in FORWARDED_PARAMS if params.get(k) not in (None, "")}
        log.info("upstream_fetch", params=forwarded)
        try:
            response = await self._get(forwarded)
        except httpx.TransportError as exc:
            log.error("upstream_unreachable", error=type(exc).__name__, attempts=self.max_attempts)
            raise UpstreamError(str(exc) or type(exc).__name__) from exc

        if response.is_error:
            try:
                details: Any = response.json()
            except ValueError:
                details = response.text or None
            log.warning("upstream_error_status", status=response.status_code)
            raise UpstreamError(
                f"Upstream responded with status {response.status_code}",
                status_code=response.status_code,
                details=details,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError("Upstream returned a non-JSON body") from exc
