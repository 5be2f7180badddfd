"""
sources/base.py — Shared plumbing for the engine's network collaborators.

Every source is handed a ready httpx.AsyncClient (owned by the caller, never
created or closed here) and carries a structlog logger bound with its name.
Subclasses add the calls they need; get() wraps the common GET-and-decode
step with timing so each source logs the same way.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

log = structlog.get_logger(__name__)


class BaseSource:
    """Base for sources that talk JSON over a shared httpx client."""

    # Override in subclass; used as the source_name log field
    name: str = "unknown"

    def __init__(self, http: httpx.AsyncClient, *, timeout: float = 30.0) -> None:
        self._http = http
        self._timeout = timeout
        self._log = log.bind(source_name=self.name)

    async def _get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        GET *url* and decode the JSON body.

        Raises:
            httpx.HTTPError: transport failure or non-2xx status.
            ValueError: the body is not JSON.
        """
        t0 = time.monotonic()
        response = await self._http.get(
            url, params=params, headers=headers, timeout=self._timeout
        )
        response.raise_for_status()
        payload = response.json()
        self._log.debug(
            "source_get_complete",
            url=url,
            status=response.status_code,
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        return payload
