"""
utils/retry.py — tenacity policy for idempotent upstream GETs.

Only the tender proxy retries. The matching engine never does: a failed
batch is skipped and a failed AI call is dropped.

Delays: base_delay * 2^(attempt-1), capped at max_delay. Each retry is
logged before the sleep; exhaustion re-raises the last exception unchanged
so callers map it exactly as they would a first-attempt failure.

Usage:
    async for attempt in upstream_retrying(max_attempts=2):
        with attempt:
            response = await http.get(url, params=params)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]

# Failures where the request may never have reached the upstream
RETRYABLE = (httpx.TransportError,)


def _log_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    log.warning(
        "upstream_retry",
        attempt=state.attempt_number,
        delay_s=round(state.next_action.sleep, 2) if state.next_action else None,
        error=type(error).__name__ if error else None,
    )


def upstream_retrying(
    max_attempts: int = 2,
    *,
    base_delay: float = 0.5,
    max_delay: float = 5.0,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE,
    sleep: Sleep = asyncio.sleep,
) -> AsyncRetrying:
    """An AsyncRetrying that retries *retry_on* up to *max_attempts* in total."""
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=base_delay, max=max_delay),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    )
