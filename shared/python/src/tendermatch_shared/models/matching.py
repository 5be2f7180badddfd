"""
models/matching.py — Match results, filter state, cache entries and pages.
"""

from __future__ import annotations

from datetime import date
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from tendermatch_shared.constants import SortKey
from tendermatch_shared.models.procurement import ProcurementRecord

T = TypeVar("T")


class AIMatch(BaseModel):
    """One reasoning-service verdict for a (record, profile) pair."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(default=0, ge=0)
    confidence: str = "low"
    reasons: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    recommendation: str = ""


class MatchResult(BaseModel):
    """
    Deterministic score for one record, optionally decorated with AI fields.

    ``score`` is an unbounded sum of points, not a percentage.
    """

    model_config = ConfigDict(frozen=True)

    record: ProcurementRecord
    score: int = Field(ge=0)
    reasons: list[str] = Field(default_factory=list)
    ai_score: int | None = None
    ai_confidence: str | None = None
    ai_reasons: list[str] | None = None
    ai_concerns: list[str] | None = None
    ai_recommendation: str | None = None

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def has_ai(self) -> bool:
        return self.ai_score is not None

    def with_ai(self, ai: AIMatch | None) -> "MatchResult":
        if ai is None:
            return self
        return self.model_copy(
            update={
                "ai_score": ai.score,
                "ai_confidence": ai.confidence,
                "ai_reasons": list(ai.reasons),
                "ai_concerns": list(ai.concerns),
                "ai_recommendation": ai.recommendation,
            }
        )


class FilterState(BaseModel):
    """
    Snapshot of the user's filter choices.

    Frozen: an edit produces a new FilterState. ``min_score`` is a minimum
    number of match points, compared against the raw deterministic score.

    ``keyword_match``: "phrase" keeps records containing the whole keywords
    string; "any" splits it on whitespace and keeps records whose title or
    description contains at least one token (the match view default).
    """

    model_config = ConfigDict(frozen=True)

    keywords: str = ""
    province: str | None = None
    category: str | None = None
    status: str | None = None
    closing_before: date | None = None
    min_score: int = Field(default=0, ge=0)
    sort_key: SortKey = "closing-soon"
    keyword_match: Literal["phrase", "any"] = "phrase"

    @classmethod
    def for_matches(cls, **overrides: object) -> "FilterState":
        values: dict[str, object] = {"sort_key": "score-desc", "keyword_match": "any"}
        values.update(overrides)
        return cls(**values)


class CacheEntry(BaseModel):
    records: list[ProcurementRecord]
    captured_at_ms: int
    date_from: str
    date_to: str


class CacheInfo(BaseModel):
    record_count: int
    age_ms: int
    remaining_ms: int
    expired: bool
    date_from: str
    date_to: str


class Page(BaseModel, Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total_count: int
    page_count: int
