"""
Request logging middleware.

Every request gets a request_id (taken from X-Request-ID when the caller
sends one). It is bound into structlog's contextvars for the duration of the
request, so engine log lines emitted while serving it carry the same id, and
it is echoed back in the X-Request-ID response header.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:16]
        start = time.monotonic()
        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    "request_failed",
                    error=str(exc),
                    duration_ms=int((time.monotonic() - start) * 1000),
                )
                raise
            logger.info(
                "request_completed",
                status=response.status_code,
                authenticated="authorization" in request.headers,
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
