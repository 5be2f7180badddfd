"""Shared test fixtures for tendermatch-api."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import respx
from fastapi.testclient import TestClient

from tendermatch_shared.config import Settings

UPSTREAM_URL = "http://upstream.test/api/OCDSReleases"
SOURCE_URL = "http://api.test/v1/tenders"
PROFILE_URL = "http://profiles.test/functions/v1/api-read-profiles"



def make_chain(data=None, count=0):
    """Create a chainable mock that returns given data on execute()."""
    chain = MagicMock()
    chain.execute.return_value = MagicMock(data=data or [], count=count)
    for method in (
        "select", "insert", "update", "delete", "eq", "order", "limit",
    ):
        getattr(chain, method).return_value = chain
    return chain


def make_supabase(table_data=None):
    """Create a mock Supabase client.

    table_data: optional dict mapping table name -> rows returned by execute().
    All unmapped tables return empty results. Each table name gets one chain,
    so tests can inspect calls made through it.
    """
    client = MagicMock()
    td = table_data or {}
    chains: dict[str, MagicMock] = {}

    def _table(name):
        if name not in chains:
            chains[name] = make_chain(td.get(name))
        return chains[name]

    client.table.side_effect = _table
    client.chains = chains
    return client


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        tenders_upstream_url=UPSTREAM_URL,
        tenders_source_url=SOURCE_URL,
        profile_service_url=PROFILE_URL,
        openai_api_key="",
        upstream_max_attempts=2,
        batch_delay_s=0,
        first_batch_size=50,
        batch_size=50,
        max_records=100,
        page_size=2,
        log_level="WARNING",
    )


@pytest.fixture()
def table_rows() -> dict:
    """Rows per Supabase table; override in a test module or class."""
    return {}


@pytest.fixture()
def supabase(table_rows):
    return make_supabase(table_rows)


@pytest.fixture()
def mock_http():
    """respx router for every outbound call the app makes."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
def app(settings, supabase):
    """Test FastAPI app with mocked Supabase and no AI."""
    from tendermatch_api.app import create_app
    return create_app(settings, supabase=supabase)


@pytest.fixture()
def client(app, mock_http):
    """HTTP test client; the lifespan runs so app.state is fully wired."""
    with TestClient(app) as c:
        yield c

