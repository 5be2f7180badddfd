"""
services/match_sessions.py — Per-token MatchSession registry with idle expiry.

Each bearer token gets its own MatchSession (and so its own session cache
and AI side map). Tokens are stored as sha256 digests, never in clear.
A session idle for longer than idle_ttl_s is dropped on the next lookup.
"""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable

import httpx
import structlog

from tendermatch_shared.config import Settings

from tendermatch_engine.pipelines.session import MatchSession, build_session
from tendermatch_engine.sources.reasoning import ReasoningClient

log = structlog.get_logger(__name__)

IDLE_TTL_S = 30 * 60


def token_key(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionRegistry:
    def __init__(
        self,
        settings: Settings,
        http: httpx.AsyncClient,
        *,
        reasoning: ReasoningClient | None = None,
        idle_ttl_s: float = IDLE_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._http = http
        self._reasoning = reasoning
        self._idle_ttl_s = idle_ttl_s
        self._clock = clock
        self._sessions: dict[str, tuple[MatchSession, float]] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, token: str) -> MatchSession:
        """The session for *token*, created on first use."""
        self.evict_expired()
        key = token_key(token)
        now = self._clock()
        entry = self._sessions.get(key)
        if entry is None:
            session = build_session(
                self._http, token, self._settings, reasoning=self._reasoning
            )
            log.info("match_session_created", session=key[:12])
        else:
            session = entry[0]
        self._sessions[key] = (session, now + self._idle_ttl_s)
        return session

    def evict_expired(self) -> int:
        """Drop idle sessions, cancelling their in-flight work. Returns the count."""
        now = self._clock()
        expired = [k for k, (_, exp) in self._sessions.items() if now > exp]
        for key in expired:
            session, _ = self._sessions.pop(key)
            session.cancel()
        if expired:
            log.info("match_sessions_evicted", count=len(expired))
        return len(expired)

    def clear(self) -> None:
        for session, _ in self._sessions.values():
            session.cancel()
        self._sessions.clear()
