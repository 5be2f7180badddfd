"""
tendermatch_shared.models — Pydantic models shared by the engine and the API.

These models are used by:
- packages/engine: normalized records, match results, filter state, cache entries
- packages/api: request validation and response serialization

Private tender rows round-trip through:
  ProcurementRecord.from_db_row(row: dict) -> ProcurementRecord
  PrivateTenderDraft.to_insert_dict() -> dict
"""

from tendermatch_shared.models.matching import (
    AIMatch,
    CacheEntry,
    CacheInfo,
    FilterState,
    MatchResult,
    Page,
)
from tendermatch_shared.models.procurement import (
    Briefing,
    Document,
    PrivateTenderDraft,
    PrivateTenderUpdate,
    ProcurementRecord,
)

__all__ = [
    "Document",
    "Briefing",
    "ProcurementRecord",
    "PrivateTenderDraft",
    "PrivateTenderUpdate",
    "AIMatch",
    "MatchResult",
    "FilterState",
    "CacheEntry",
    "CacheInfo",
    "Page",
]
