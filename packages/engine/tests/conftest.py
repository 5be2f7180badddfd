"""
tests/conftest.py — Shared pytest fixtures for the engine test suite.

Provides:
  etenders_page    — parsed upstream page (3 raw releases, total=120)
  company_profile  — company-shaped profile JSON
  startup_profile  — startup-shaped profile JSON
  now              — fixed reference time for scoring
  make_record()    — factory for ProcurementRecord with sensible defaults
  mock_supabase_client — MagicMock of the Supabase client chain
  no_sleep         — async sleep replacement that records requested delays
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tendermatch_shared.models.procurement import ProcurementRecord

FIXTURES_DIR = Path(__file__).parent / "fixtures"

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def etenders_page() -> dict:
    return json.loads((FIXTURES_DIR / "etenders_page.json").read_text())


@pytest.fixture
def company_profile() -> dict:
    return json.loads((FIXTURES_DIR / "profile_company.json").read_text())


@pytest.fixture
def startup_profile() -> dict:
    return json.loads((FIXTURES_DIR / "profile_startup.json").read_text())


@pytest.fixture
def now() -> datetime:
    return NOW


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@pytest.fixture
def make_record():
    counter = iter(range(1, 10_000))

    def _make(
        title: str = "Tender",
        *,
        closes_in_days: float | None = None,
        **fields,
    ) -> ProcurementRecord:
        fields.setdefault("id", f"ocds-test-{next(counter)}")
        if closes_in_days is not None:
            fields["closing_date"] = NOW + timedelta(days=closes_in_days)
        return ProcurementRecord(title=title, **fields)

    return _make


# ---------------------------------------------------------------------------
# Supabase client mock
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_supabase_client() -> MagicMock:
    """
    A MagicMock that simulates the supabase.Client table chain.

    Every chain ends in .execute() returning an object with .data = [].
    Override per test via client.table.return_value...
    """
    client = MagicMock()
    result = MagicMock()
    result.data = []

    table = client.table.return_value
    table.insert.return_value.execute.return_value = result
    table.select.return_value.order.return_value.execute.return_value = result
    table.select.return_value.eq.return_value.limit.return_value.execute.return_value = result
    table.update.return_value.eq.return_value.execute.return_value = result
    table.delete.return_value.eq.return_value.execute.return_value = result
    return client


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def no_sleep() -> RecordingSleep:
    return RecordingSleep()
