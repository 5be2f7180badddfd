"""
loaders/private_tenders.py — CRUD store for user-entered tenders.

Backed by the Supabase table ``private_tenders`` (flat columns, see
ProcurementRecord.from_db_row). Records come back normalized, with
is_private=True and created_at set, ready for the same filter/sort pipeline
as upstream tenders.

Usage:
    store = PrivateTenderStore(create_supabase_client(settings))

    record = await store.create(PrivateTenderDraft(...))
    records = await store.list()          # newest first
    record = await store.update(record.id, PrivateTenderUpdate(status="closed"))
    await store.delete(record.id)
"""

from __future__ import annotations

from typing import Any

import structlog
from supabase import Client

from tendermatch_shared.models.procurement import (
    PrivateTenderDraft,
    PrivateTenderUpdate,
    ProcurementRecord,
)

from tendermatch_engine.errors import RecordNotFoundError

log = structlog.get_logger(__name__)

TABLE = "private_tenders"


class PrivateTenderStore:
    def __init__(self, client: Client, *, table: str = TABLE) -> None:
        self._client = client
        self._table = table

    def _rows(self, response: Any) -> list[dict[str, Any]]:
        data = getattr(response, "data", None)
        return data if isinstance(data, list) else []

    async def create(self, draft: PrivateTenderDraft) -> ProcurementRecord:
        """Insert *draft* and return the stored record (id = ocid)."""
        row = draft.to_insert_dict()
        response = self._client.table(self._table).insert(row).execute()
        rows = self._rows(response)
        stored = rows[0] if rows else row
        log.info("private_tender_created", ocid=stored.get("ocid"))
        return ProcurementRecord.from_db_row(stored)

    async def list(self) -> list[ProcurementRecord]:
        """All private tenders, newest first."""
        response = (
            self._client.table(self._table)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        records = [ProcurementRecord.from_db_row(r) for r in self._rows(response)]
        log.info("private_tenders_listed", rows=len(records))
        return records

    async def update(self, ocid: str, changes: PrivateTenderUpdate) -> ProcurementRecord:
        """
        Apply *changes* to one tender.

        Raises:
            RecordNotFoundError: no row has this ocid.
        """
        updates = changes.to_update_dict()
        if not updates:
            return await self.get(ocid)
        response = (
            self._client.table(self._table).update(updates).eq("ocid", ocid).execute()
        )
        rows = self._rows(response)
        if not rows:
            raise RecordNotFoundError(ocid)
        log.info("private_tender_updated", ocid=ocid, fields=sorted(updates))
        return ProcurementRecord.from_db_row(rows[0])

    async def get(self, ocid: str) -> ProcurementRecord:
        """
        Raises:
            RecordNotFoundError: no row has this ocid.
        """
        response = (
            self._client.table(self._table).select("*").eq("ocid", ocid).limit(1).execute()
        )
        rows = self._rows(response)
        if not rows:
            raise RecordNotFoundError(ocid)
        return ProcurementRecord.from_db_row(rows[0])

    async def delete(self, ocid: str) -> None:
        """Delete one tender. Deleting a missing ocid is not an error."""
        self._client.table(self._table).delete().eq("ocid", ocid).execute()
        log.info("private_tender_deleted", ocid=ocid)
