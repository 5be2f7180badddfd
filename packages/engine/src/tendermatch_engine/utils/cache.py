"""
utils/cache.py — Session cache for the merged tender set.

One slot per cache (the last completed load), stored as a serialized
CacheEntry in a string key-value backend, the same way a browser keeps it
in sessionStorage. A read returns None when:
  - the slot is empty,
  - the entry is older than the TTL (the slot is cleared),
  - the requested date range differs from the stored one (string equality),
  - the stored payload does not decode (the slot is cleared).

Writes replace the whole payload in one assignment, so a reader sees either
the previous entry or the new one.

AI analysis is never cached; a cache hit still runs the AI overlay.

Usage:
    from tendermatch_engine.utils.cache import SessionCache

    cache = SessionCache(ttl_s=300)
    cache.put(records, "2026-09-19", "2026-10-19")
    records = cache.get("2026-09-19", "2026-10-19")
    cache.info()   # CacheInfo(record_count=..., age_ms=..., remaining_ms=...)
"""

from __future__ import annotations

import time
from collections.abc import Callable, MutableMapping, Sequence

import structlog
from pydantic import ValidationError

from tendermatch_shared.constants import CACHE_TTL_S
from tendermatch_shared.models.matching import CacheEntry, CacheInfo
from tendermatch_shared.models.procurement import ProcurementRecord

log = structlog.get_logger(__name__)

CACHE_KEY = "tendermatch:matched_tenders"


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionCache:
    """Time- and date-range-keyed memo of the last merged record set."""

    def __init__(
        self,
        ttl_s: float = CACHE_TTL_S,
        *,
        storage: MutableMapping[str, str] | None = None,
        clock: Callable[[], int] = _now_ms,
        key: str = CACHE_KEY,
    ) -> None:
        self._ttl_ms = int(ttl_s * 1000)
        self._storage: MutableMapping[str, str] = storage if storage is not None else {}
        self._clock = clock
        self._key = key

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def _load(self) -> CacheEntry | None:
        payload = self._storage.get(self._key)
        if payload is None:
            return None
        try:
            return CacheEntry.model_validate_json(payload)
        except ValidationError as exc:
            log.warning("cache_payload_corrupt", error=str(exc))
            self.invalidate()
            return None

    def get(self, date_from: str, date_to: str) -> list[ProcurementRecord] | None:
        entry = self._load()
        if entry is None:
            return None

        age = self._clock() - entry.captured_at_ms
        if age > self._ttl_ms:
            log.info("cache_expired", age_ms=age)
            self.invalidate()
            return None

        if entry.date_from != date_from or entry.date_to != date_to:
            log.info(
                "cache_range_mismatch",
                cached_from=entry.date_from,
                cached_to=entry.date_to,
                date_from=date_from,
                date_to=date_to,
            )
            return None

        log.info("cache_hit", records=len(entry.records), age_ms=age)
        return entry.records

    def put(self, records: Sequence[ProcurementRecord], date_from: str, date_to: str) -> None:
        entry = CacheEntry(
            records=list(records),
            captured_at_ms=self._clock(),
            date_from=date_from,
            date_to=date_to,
        )
        self._storage[self._key] = entry.model_dump_json()
        log.info("cache_stored", records=len(entry.records))

    def invalidate(self) -> None:
        self._storage.pop(self._key, None)
        log.debug("cache_cleared")

    def info(self) -> CacheInfo | None:
        """Age and remaining lifetime of the stored entry, for diagnostics."""
        entry = self._load()
        if entry is None:
            return None
        age = self._clock() - entry.captured_at_ms
        remaining = self._ttl_ms - age
        return CacheInfo(
            record_count=len(entry.records),
            age_ms=age,
            remaining_ms=remaining,
            expired=remaining <= 0,
            date_from=entry.date_from,
            date_to=entry.date_to,
        )
