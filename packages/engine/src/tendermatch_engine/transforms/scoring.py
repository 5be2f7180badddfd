"""
transforms/scoring.py — Deterministic relevance scoring of records against a profile.

Additive point system, no upper bound:

    +10  per profile keyword found in "title description" (lowercased)
    +20  record province equals the profile location (exact, case-sensitive)
    +30  record category is in the profile's category list (exact)
    +15  closes in 8..29 whole days ("good timeline")
    +5   closes in 1..7 whole days ("closes soon")

A missing field skips its check. Scores are points, not percentages; the
minimum-score filter compares against the same points.

Usage:
    from tendermatch_engine.transforms.scoring import score, score_all

    points, reasons = score(record, profile)
    matches = score_all(records, profile)   # score > 0 only, best first
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, NamedTuple

from tendermatch_shared.models.matching import MatchResult
from tendermatch_shared.models.procurement import ProcurementRecord
from tendermatch_shared.time_utils import days_until, utcnow

from tendermatch_engine.transforms.profile import ResolvedProfile

KEYWORD_POINTS = 10
LOCATION_POINTS = 20
CATEGORY_POINTS = 30
GOOD_TIMELINE_POINTS = 15
CLOSING_SOON_POINTS = 5

GOOD_TIMELINE_DAYS = (7, 30)  # exclusive bounds
CLOSING_SOON_MAX_DAYS = 7


class Score(NamedTuple):
    score: int
    reasons: list[str]


def _resolved(profile: Any) -> ResolvedProfile:
    if isinstance(profile, ResolvedProfile):
        return profile
    return ResolvedProfile.from_raw(profile)


def score(
    record: ProcurementRecord,
    profile: Any,
    *,
    now: datetime | None = None,
) -> Score:
    """
    Score one record against a profile (raw dict or ResolvedProfile).

    Reasons are ordered keyword, location, category, timeliness.
    """
    resolved = _resolved(profile)
    points = 0
    reasons: list[str] = []

    text = f"{record.title} {record.description}".lower()
    for keyword in resolved.keywords:
        if keyword in text:
            points += KEYWORD_POINTS
            reasons.append(f"Matches keyword: {keyword}")

    if record.province and resolved.location and record.province == resolved.location:
        points += LOCATION_POINTS
        reasons.append(f"Located in {record.province}")

    if record.category and record.category in resolved.categories:
        points += CATEGORY_POINTS
        reasons.append(f"Category match: {record.category}")

    if record.closing_date is not None:
        days = days_until(record.closing_date, now=now or utcnow())
        low, high = GOOD_TIMELINE_DAYS
        if low < days < high:
            points += GOOD_TIMELINE_POINTS
            reasons.append(f"Good timeline: {days} days to close")
        elif 0 < days <= CLOSING_SOON_MAX_DAYS:
            points += CLOSING_SOON_POINTS
            reasons.append(f"Closes soon: {days} days")

    return Score(points, reasons)


def score_all(
    records: Iterable[ProcurementRecord],
    profile: Any,
    *,
    now: datetime | None = None,
) -> list[MatchResult]:
    """
    Score every record and keep those with score > 0, highest first.

    Pure: builds fresh MatchResults on every call. Ties keep input order.
    """
    resolved = _resolved(profile)
    reference = now or utcnow()
    matches: list[MatchResult] = []
    for record in records:
        points, reasons = score(record, resolved, now=reference)
        if points > 0:
            matches.append(MatchResult(record=record, score=points, reasons=reasons))
    matches.sort(key=lambda m: m.score, reverse=True)
    return matches
