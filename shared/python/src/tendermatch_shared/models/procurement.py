"""
models/procurement.py — Pydantic models for tender records and private tender input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator

from tendermatch_shared.constants import (
    DEFAULT_CURRENCY,
    NO_DESCRIPTION,
    PRIVATE_ID_PREFIX,
    UNTITLED,
)
from tendermatch_shared.time_utils import parse_iso_datetime


class Document(BaseModel):
    """A tender document link; records keep these unique by url."""

    id: str | None = None
    title: str = "Untitled Document"
    url: str
    kind: str | None = None


class Briefing(BaseModel):
    compulsory: bool = False
    date: datetime | None = None
    venue: str | None = None


class ProcurementRecord(BaseModel):
    """Canonical tender, public (OCDS release) or privately entered."""

    id: str
    title: str = UNTITLED
    description: str = NO_DESCRIPTION
    buyer_name: str | None = None
    province: str | None = None
    category: str | None = None
    status: str | None = None
    opening_date: datetime | None = None
    closing_date: datetime | None = None
    release_date: datetime | None = None
    value_amount: Decimal | None = None
    currency: str | None = None
    procurement_method: str | None = None
    procuring_entity: str | None = None
    tags: list[str] = Field(default_factory=list)
    documents: list[Document] = Field(default_factory=list)
    briefing: Briefing | None = None
    is_private: bool = False
    created_at: datetime | None = None
    raw_data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "ProcurementRecord":
        """Build a record from a flat private_tenders row."""
        briefing = None
        if row.get("briefing_enabled") or row.get("briefing_date"):
            briefing = Briefing(
                compulsory=bool(row.get("briefing_compulsory")),
                date=parse_iso_datetime(row.get("briefing_date")),
                venue=row.get("briefing_venue"),
            )

        documents: list[Document] = []
        seen: set[str] = set()
        for doc in row.get("documents") or []:
            url = doc.get("url") if isinstance(doc, dict) else None
            if not url or url in seen:
                continue
            seen.add(url)
            documents.append(
                Document(
                    id=doc.get("id"),
                    title=doc.get("title") or "Untitled Document",
                    url=url,
                    kind=doc.get("documentType") or doc.get("kind"),
                )
            )

        value = row.get("value")
        return cls(
            id=row.get("ocid") or f"{PRIVATE_ID_PREFIX}{uuid4()}",
            title=row.get("title") or UNTITLED,
            description=row.get("description") or NO_DESCRIPTION,
            buyer_name=row.get("buyer_name") or row.get("procuring_entity"),
            province=row.get("province") or None,
            category=row.get("main_procurement_category") or row.get("category") or None,
            status=row.get("status") or None,
            opening_date=parse_iso_datetime(row.get("tender_period_start")),
            closing_date=parse_iso_datetime(row.get("tender_period_end")),
            release_date=parse_iso_datetime(row.get("date")),
            value_amount=Decimal(str(value)) if value not in (None, "") else None,
            currency=row.get("currency") or DEFAULT_CURRENCY,
            procurement_method=row.get("procurement_method"),
            procuring_entity=row.get("procuring_entity"),
            tags=list(row.get("tag") or ["tender"]),
            documents=documents,
            briefing=briefing,
            is_private=True,
            created_at=parse_iso_datetime(row.get("created_at")),
            raw_data=row,
        )


class DocumentInput(BaseModel):
    title: str
    url: str
    kind: str | None = None

    @field_validator("title", "url")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Both document title and URL are required")
        return v.strip()


class PrivateTenderDraft(BaseModel):
    """User input for a new private tender."""

    title: str
    description: str
    buyer: str
    opening_date: datetime
    closing_date: datetime
    ocid: str | None = None
    province: str | None = None
    category: str | None = None
    status: str = "active"
    value_amount: Decimal | None = None
    currency: str = DEFAULT_CURRENCY
    procurement_method: str | None = None
    briefing_enabled: bool = False
    briefing_compulsory: bool = False
    briefing_date: datetime | None = None
    briefing_venue: str | None = None
    documents: list[DocumentInput] = Field(default_factory=list)

    @field_validator("title", "description", "buyer")
    @classmethod
    def required_text(cls, v: str, info: Any) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} is required")
        return v.strip()

    @field_validator("opening_date", "closing_date", "briefing_date")
    @classmethod
    def as_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def check_dates(self) -> "PrivateTenderDraft":
        if self.closing_date < self.opening_date:
            raise ValueError("Closing date must be after the opening date")
        if (
            self.briefing_enabled
            and self.briefing_date is not None
            and self.briefing_date < datetime.now(timezone.utc)
        ):
            raise ValueError("Briefing session date cannot be in the past")
        return self

    def resolved_ocid(self) -> str:
        return self.ocid.strip() if self.ocid and self.ocid.strip() else f"{PRIVATE_ID_PREFIX}{uuid4()}"

    def to_insert_dict(self) -> dict[str, Any]:
        return {
            "ocid": self.resolved_ocid(),
            "date": datetime.now(timezone.utc).isoformat(),
            "tag": ["tender"],
            "initiation_type": "tender",
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "value": float(self.value_amount) if self.value_amount is not None else None,
            "currency": self.currency,
            "procurement_method": self.procurement_method,
            "main_procurement_category": self.category,
            "province": self.province,
            "tender_period_start": self.opening_date.isoformat(),
            "tender_period_end": self.closing_date.isoformat(),
            "procuring_entity": self.buyer,
            "buyer_name": self.buyer,
            "briefing_enabled": self.briefing_enabled,
            "briefing_compulsory": self.briefing_compulsory if self.briefing_enabled else False,
            "briefing_date": (
                self.briefing_date.isoformat()
                if self.briefing_enabled and self.briefing_date
                else None
            ),
            "briefing_venue": self.briefing_venue if self.briefing_enabled else None,
            "documents": [
                {
                    "id": f"doc-{i + 1}",
                    "title": d.title,
                    "url": d.url,
                    "documentType": d.kind or "tenderNotice",
                }
                for i, d in enumerate(self.documents)
            ],
        }


class PrivateTenderUpdate(BaseModel):
    """Partial update of a private tender; unset fields are left alone."""

    title: str | None = None
    description: str | None = None
    status: str | None = None
    value_amount: Decimal | None = None
    province: str | None = None
    category: str | None = None
    closing_date: datetime | None = None

    def to_update_dict(self) -> dict[str, Any]:
        fields = self.model_dump(exclude_unset=True)
        updates: dict[str, Any] = {}
        for key in ("title", "description", "status", "province"):
            if key in fields:
                updates[key] = fields[key]
        if "category" in fields:
            updates["main_procurement_category"] = fields["category"]
        if "value_amount" in fields:
            amount = fields["value_amount"]
            updates["value"] = float(amount) if amount is not None else None
        if "closing_date" in fields:
            closing = fields["closing_date"]
            updates["tender_period_end"] = closing.isoformat() if closing else None
        return updates
