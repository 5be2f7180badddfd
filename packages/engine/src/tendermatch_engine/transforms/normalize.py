"""
transforms/normalize.py — OCDS release → ProcurementRecord normalization.

eTenders releases follow the Open Contracting Data Standard loosely: any
nested block may be missing, null, or the wrong type. Every accessor here
goes through dig(), which returns None instead of raising, and every
canonical field has a fallback literal.

Accepted input shapes:
  - a bare release:            {"ocid": ..., "tender": {...}, "buyer": {...}}
  - a release package wrapper: {"releases": [{...release...}]}
  - a private tender row:      see ProcurementRecord.from_db_row

Document extraction scans tender, planning, every contract and every award
(in that order) and keeps the first document seen for each url.

Usage:
    from tendermatch_engine.transforms.normalize import normalize, normalize_many

    record = normalize(raw_release)
    records = normalize_many(page["results"])
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import uuid4

import structlog

from tendermatch_shared.constants import NO_DESCRIPTION, PRIVATE_ID_PREFIX, UNTITLED
from tendermatch_shared.models.procurement import Briefing, Document, ProcurementRecord
from tendermatch_shared.time_utils import parse_iso_datetime

log = structlog.get_logger(__name__)

Path = tuple[str | int, ...]


# ---------------------------------------------------------------------------
# Loose JSON access
# ---------------------------------------------------------------------------

def dig(data: Any, *path: str | int) -> Any:
    """
    Follow *path* through nested dicts/lists, returning None on any miss.

    String steps index dicts, integer steps index lists.
    """
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


def first_present(data: Any, paths: Iterable[Path]) -> Any:
    """Return the first value along *paths* that is not None/empty."""
    for path in paths:
        value = dig(data, *path)
        if is_present(value):
            return value
    return None


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


# ---------------------------------------------------------------------------
# Release unwrapping
# ---------------------------------------------------------------------------

def unwrap_release(raw: Any) -> dict[str, Any]:
    """Return the release dict, unwrapping a {"releases": [...]} package."""
    if not isinstance(raw, dict):
        return {}
    if isinstance(raw.get("tender"), dict):
        return raw
    inner = dig(raw, "releases", 0)
    if isinstance(inner, dict):
        merged = dict(inner)
        merged.setdefault("ocid", raw.get("ocid"))
        return merged
    return raw


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

_DOCUMENT_SOURCES: tuple[Path, ...] = (
    ("tender", "documents"),
    ("planning", "documents"),
)


def _document_lists(release: dict[str, Any]) -> Iterable[Any]:
    for path in _DOCUMENT_SOURCES:
        yield dig(release, *path)
    for block in ("contracts", "awards"):
        entries = release.get(block)
        if isinstance(entries, list):
            for entry in entries:
                yield dig(entry, "documents")


def extract_documents(release: dict[str, Any]) -> list[Document]:
    """Flatten all document lists into one list, unique by url (first wins)."""
    documents: list[Document] = []
    seen: set[str] = set()
    for docs in _document_lists(release):
        if not isinstance(docs, list):
            continue
        for doc in docs:
            url = _text(dig(doc, "url"))
            if url is None or url in seen:
                continue
            seen.add(url)
            documents.append(
                Document(
                    id=_text(dig(doc, "id")),
                    title=_text(dig(doc, "title")) or "Untitled Document",
                    url=url,
                    kind=_text(dig(doc, "documentType")),
                )
            )
    return documents


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------

def _briefing(release: dict[str, Any]) -> Briefing | None:
    session = dig(release, "tender", "briefingSession")
    if not isinstance(session, dict) or not session:
        return None
    if session.get("isSession") is False:
        return None
    return Briefing(
        compulsory=bool(session.get("compulsory")),
        date=parse_iso_datetime(session.get("date")),
        venue=_text(session.get("venue")),
    )


def _value(release: dict[str, Any]) -> tuple[Decimal | None, str | None]:
    amount = dig(release, "tender", "value", "amount")
    currency = _text(dig(release, "tender", "value", "currency"))
    if amount is None or isinstance(amount, bool):
        return None, currency
    try:
        return Decimal(str(amount)), currency
    except InvalidOperation:
        return None, currency


def _tags(release: dict[str, Any]) -> list[str]:
    tags = release.get("tag")
    if isinstance(tags, list):
        return [t for t in tags if isinstance(t, str)]
    if isinstance(tags, str):
        return [tags]
    return []


def normalize(raw: Any, *, private: bool = False) -> ProcurementRecord:
    """
    Canonicalize one loosely-structured record.

    Never raises on missing or malformed nested fields. Upstream records keep
    their ocid as id (falling back to the release id); private records get a
    prefixed uuid when they arrive without one.

    Raises:
        ValueError: an upstream record carries no ocid or release id at all.
    """
    release = unwrap_release(raw)

    record_id = _text(release.get("ocid")) or _text(release.get("id"))
    if record_id is None:
        if not private:
            raise ValueError("upstream record has no ocid")
        record_id = f"{PRIVATE_ID_PREFIX}{uuid4()}"

    amount, currency = _value(release)

    return ProcurementRecord(
        id=record_id,
        title=_text(dig(release, "tender", "title")) or UNTITLED,
        description=_text(dig(release, "tender", "description")) or NO_DESCRIPTION,
        buyer_name=_text(
            first_present(
                release,
                (("buyer", "name"), ("tender", "procuringEntity", "name")),
            )
        ),
        province=_text(dig(release, "tender", "province")),
        category=_text(
            first_present(
                release,
                (("tender", "mainProcurementCategory"), ("tender", "category")),
            )
        ),
        status=_text(dig(release, "tender", "status")),
        opening_date=parse_iso_datetime(dig(release, "tender", "tenderPeriod", "startDate")),
        closing_date=parse_iso_datetime(dig(release, "tender", "tenderPeriod", "endDate")),
        release_date=parse_iso_datetime(release.get("date")),
        value_amount=amount,
        currency=currency,
        procurement_method=_text(dig(release, "tender", "procurementMethod")),
        procuring_entity=_text(dig(release, "tender", "procuringEntity", "name")),
        tags=_tags(release),
        documents=extract_documents(release),
        briefing=_briefing(release),
        is_private=private,
        created_at=parse_iso_datetime(release.get("created_at")) if private else None,
        raw_data=release,
    )


def normalize_many(raws: Iterable[Any], *, private: bool = False) -> list[ProcurementRecord]:
    """
    Normalize a batch, dropping (and logging) records that carry no id.

    Order is preserved.
    """
    records: list[ProcurementRecord] = []
    dropped = 0
    for raw in raws:
        try:
            records.append(normalize(raw, private=private))
        except ValueError:
            dropped += 1
    if dropped:
        log.warning("records_without_id_dropped", dropped=dropped, kept=len(records))
    return records


def extract_results(payload: Any) -> list[Any]:
    """
    Pull the record list out of a page response.

    Accepts {"results": [...]}, {"data": [...]}, {"releases": [...]} or a bare list;
    anything else yields an empty list.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("results", "data", "releases"):
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


def extract_total(payload: Any) -> int | None:
    """The upstream's total record count, when it reports one."""
    if not isinstance(payload, dict):
        return None
    for key in ("total", "count", "totalReleases"):
        value = payload.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
    return None
