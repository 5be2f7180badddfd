"""
time_utils.py — Date parsing helpers for loosely-formatted OCDS timestamps.

eTenders publishes dates in several shapes:
- ISO date: "2026-02-28"
- ISO datetime with zone: "2026-02-28T23:59:59Z", "2026-02-28T10:00:00+02:00"
- Naive ISO datetime: "2026-02-28T10:00:00" (treated as UTC)

Usage:
    from tendermatch_shared.time_utils import parse_iso_datetime, days_until

    dt = parse_iso_datetime("2026-02-28T23:59:59Z")
    days = days_until(dt, now=utcnow())
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any

from dateutil.parser import isoparse

_SECONDS_PER_DAY = 24 * 60 * 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_iso_datetime(raw: Any) -> datetime | None:
    """
    Parse an ISO-8601 date or datetime into an aware UTC datetime.

    Returns None for empty, non-string or unparseable input rather than
    raising, so callers can treat a bad date like a missing one.
    """
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, date):
        dt = datetime(raw.year, raw.month, raw.day)
    elif isinstance(raw, str) and raw.strip():
        try:
            dt = isoparse(raw.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def days_until(target: datetime, *, now: datetime | None = None) -> int:
    """Whole days from *now* until *target*, floored (negative when past)."""
    reference = now or utcnow()
    delta = (target - reference).total_seconds()
    return math.floor(delta / _SECONDS_PER_DAY)


def epoch_ms(dt: datetime | None) -> int:
    """Milliseconds since the epoch; None maps to 0."""
    if dt is None:
        return 0
    return int(dt.timestamp() * 1000)
