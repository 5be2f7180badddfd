"""
constants.py — shared constants used across the engine and API.

Province names, OCDS category/status vocabularies, sort keys and the
engine's fixed batch/cache/AI limits are defined here so they stay in
sync between Python packages.
"""

from __future__ import annotations

from typing import Final, Literal

# ---------------------------------------------------------------------------
# South African provinces (as published by eTenders)
# ---------------------------------------------------------------------------
PROVINCES: Final[tuple[str, ...]] = (
    "Eastern Cape",
    "Free State",
    "Gauteng",
    "KwaZulu-Natal",
    "Limpopo",
    "Mpumalanga",
    "Northern Cape",
    "North West",
    "Western Cape",
    "National",
)

# OCDS mainProcurementCategory codelist
CATEGORIES: Final[tuple[str, ...]] = ("goods", "services", "works")

# OCDS tender status codelist
STATUSES: Final[tuple[str, ...]] = (
    "planning",
    "planned",
    "active",
    "cancelled",
    "unsuccessful",
    "complete",
    "withdrawn",
)

# ---------------------------------------------------------------------------
# Sort keys
# ---------------------------------------------------------------------------
SortKey = Literal[
    "closing-soon",
    "closing-late",
    "title-asc",
    "title-desc",
    "score-desc",
    "score-asc",
    "recently-added",
]

SORT_KEYS: Final[tuple[str, ...]] = (
    "closing-soon",
    "closing-late",
    "title-asc",
    "title-desc",
    "score-desc",
    "score-asc",
    "recently-added",
)

# ---------------------------------------------------------------------------
# Engine limits
# ---------------------------------------------------------------------------
PAGE_SIZE: Final[int] = 250
FIRST_BATCH_SIZE: Final[int] = 50
BATCH_SIZE: Final[int] = 50
BATCH_DELAY_S: Final[float] = 0.3
CACHE_TTL_S: Final[float] = 5 * 60
AI_MAX_RECORDS: Final[int] = 10
AI_CALL_DELAY_S: Final[float] = 0.5

PRIVATE_ID_PREFIX: Final[str] = "private-"
DEFAULT_CURRENCY: Final[str] = "ZAR"

UNTITLED: Final[str] = "Untitled Tender"
NO_DESCRIPTION: Final[str] = "No description available"
