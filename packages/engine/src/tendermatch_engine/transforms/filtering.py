"""
transforms/filtering.py — Filter, sort and paginate records or match results.

apply() is a pure function of (items, FilterState). Items may be plain
ProcurementRecords (browse / private views) or MatchResults (match view);
score-based filters and sorts treat a plain record as scoring 0.

Filters are ANDed:
  keywords        "phrase": case-insensitive substring of title/description/buyer/province/category
                  "any": at least one whitespace-separated token in title or description
  province        exact
  category        exact
  status          exact
  closing_before  closing day <= the given day; undated records fail this filter only
  min_score       match score >= min_score (points, not percent)

Every sort is a stable Python sort with explicit handling of missing
values, so equal keys keep their input order.

Usage:
    from tendermatch_engine.transforms.filtering import apply, paginate

    view = apply(matches, FilterState.for_matches(province="Gauteng"))
    page = paginate(view, page=1)
"""

from __future__ import annotations

import math
import unicodedata
from collections.abc import Callable, Sequence
from typing import TypeVar

from tendermatch_shared.constants import PAGE_SIZE
from tendermatch_shared.models.matching import FilterState, MatchResult, Page
from tendermatch_shared.models.procurement import ProcurementRecord
from tendermatch_shared.time_utils import epoch_ms, parse_iso_datetime

Item = TypeVar("Item", ProcurementRecord, MatchResult)


def _record(item: ProcurementRecord | MatchResult) -> ProcurementRecord:
    return item.record if isinstance(item, MatchResult) else item


def _score(item: ProcurementRecord | MatchResult) -> int:
    return item.score if isinstance(item, MatchResult) else 0


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def _matches_keywords(record: ProcurementRecord, needle: str) -> bool:
    haystacks = (
        record.title,
        record.description,
        record.buyer_name,
        record.province,
        record.category,
    )
    return any(h is not None and needle in h.lower() for h in haystacks)


def _matches_any_token(record: ProcurementRecord, tokens: list[str]) -> bool:
    text = f"{record.title or ''} {record.description or ''}".lower()
    return any(token in text for token in tokens)


def _predicates(state: FilterState) -> list[Callable[[ProcurementRecord | MatchResult], bool]]:
    checks: list[Callable[[ProcurementRecord | MatchResult], bool]] = []

    needle = state.keywords.strip().lower()
    if needle and state.keyword_match == "any":
        tokens = needle.split()
        checks.append(lambda item: _matches_any_token(_record(item), tokens))
    elif needle:
        checks.append(lambda item: _matches_keywords(_record(item), needle))
    if state.province:
        checks.append(lambda item: _record(item).province == state.province)
    if state.category:
        checks.append(lambda item: _record(item).category == state.category)
    if state.status:
        checks.append(lambda item: _record(item).status == state.status)
    if state.closing_before is not None:
        limit = state.closing_before

        def closes_in_time(item: ProcurementRecord | MatchResult) -> bool:
            closing = parse_iso_datetime(_record(item).closing_date)
            # Whole UTC days, inclusive: anything closing on the limit day passes,
            # including tenders that close late in that day.
            return closing is not None and closing.date() <= limit

        checks.append(closes_in_time)
    if state.min_score > 0:
        checks.append(lambda item: _score(item) >= state.min_score)
    return checks


def filter_items(items: Sequence[Item], state: FilterState) -> list[Item]:
    checks = _predicates(state)
    return [item for item in items if all(check(item) for check in checks)]


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------

def title_key(title: str) -> tuple[str, str]:
    """
    Collation key approximating locale-aware ordering.

    Accents are stripped and case folded for the primary comparison; the
    original title breaks ties so "apple" and "Apple" still order consistently.
    """
    decomposed = unicodedata.normalize("NFKD", title)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base.casefold(), title


def _by_closing(items: list[Item], *, descending: bool) -> list[Item]:
    dated = [i for i in items if _record(i).closing_date is not None]
    undated = [i for i in items if _record(i).closing_date is None]
    dated.sort(key=lambda i: _record(i).closing_date, reverse=descending)
    return dated + undated


def sort_items(items: Sequence[Item], sort_key: str) -> list[Item]:
    """Stable sort by *sort_key*; an unknown key leaves the order unchanged."""
    result = list(items)
    if sort_key == "closing-soon":
        return _by_closing(result, descending=False)
    if sort_key == "closing-late":
        return _by_closing(result, descending=True)
    if sort_key == "title-asc":
        result.sort(key=lambda i: title_key(_record(i).title))
    elif sort_key == "title-desc":
        result.sort(key=lambda i: title_key(_record(i).title), reverse=True)
    elif sort_key == "score-desc":
        result.sort(key=_score, reverse=True)
    elif sort_key == "score-asc":
        result.sort(key=_score)
    elif sort_key == "recently-added":
        result.sort(key=lambda i: epoch_ms(_record(i).created_at), reverse=True)
    return result


def apply(items: Sequence[Item], state: FilterState) -> list[Item]:
    """Filter then sort. Idempotent: apply(apply(x, s), s) == apply(x, s)."""
    return sort_items(filter_items(items, state), state.sort_key)


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

def page_count(total: int, page_size: int = PAGE_SIZE) -> int:
    """ceil(total / page_size), never less than 1."""
    return max(1, math.ceil(total / page_size))


def paginate(items: Sequence[Item], page: int = 1, page_size: int = PAGE_SIZE) -> Page[Item]:
    """
    Slice out a 1-indexed page.

    Pages past the end are empty; page numbers below 1 are treated as 1.
    """
    page = max(1, page)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        page=page,
        page_size=page_size,
        total_count=len(items),
        page_count=page_count(len(items), page_size),
    )
