"""Tests for the match endpoints."""

from __future__ import annotations

import httpx
import pytest

AUTH = {"Authorization": "Bearer user-token-1"}

PROFILE = {
    "company": {
        "industry": "Medical devices",
        "province": "Gauteng",
        "categories": ["goods"],
    },
    "profile": {"interests": ["hospitals"]},
}

TENDERS = {
    "results": [
        {
            "ocid": "ocds-a",
            "tender": {
                "title": "Supply of medical equipment",
                "description": "Diagnostic devices for district hospitals",
                "province": "Gauteng",
                "mainProcurementCategory": "goods",
            },
        },
        {
            "ocid": "ocds-b",
            "tender": {
                "title": "Road resurfacing",
                "description": "Resurfacing of the R101",
                "province": "Limpopo",
                "mainProcurementCategory": "works",
            },
        },
    ],
    "total": 2,
}

WINDOW = {"date_from": "2026-09-19", "date_to": "2026-10-19"}


@pytest.fixture()
def upstream(mock_http, settings):
    """Profile and tender source routes, returned for call inspection."""
    profile = mock_http.get(url__startswith=settings.profile_service_url).mock(
        return_value=httpx.Response(200, json=PROFILE)
    )
    tenders = mock_http.get(url__startswith=settings.tenders_source_url).mock(
        return_value=httpx.Response(200, json=TENDERS)
    )
    return profile, tenders


def test_requires_bearer_token(client):
    assert client.post("/v1/matches", json=WINDOW).status_code == 401
    assert client.get("/v1/matches").status_code == 401


def test_inverted_range_is_422(client, upstream):
    resp = client.post(
        "/v1/matches",
        json={"date_from": "2026-10-19", "date_to": "2026-09-19"},
        headers=AUTH,
    )
    assert resp.status_code == 422
    profile, _ = upstream
    assert not profile.called


def test_profile_failure_is_502(client, mock_http, settings):
    mock_http.get(url__startswith=settings.profile_service_url).mock(
        return_value=httpx.Response(401, json={"error": "expired"})
    )
    resp = client.post("/v1/matches", json=WINDOW, headers=AUTH)
    assert resp.status_code == 502
    assert "401" in resp.json()["detail"]


def test_run_matches(client, upstream):
    resp = client.post("/v1/matches", json=WINDOW, headers=AUTH)

    assert resp.status_code == 200
    body = resp.json()
    assert [m["record"]["id"] for m in body["data"]] == ["ocds-a"]
    match = body["data"][0]
    assert match["score"] >= 50
    assert "Located in Gauteng" in match["reasons"]
    assert match["ai_score"] is None

    meta = body["meta"]
    assert meta["records_scanned"] == 2
    assert meta["from_cache"] is False
    assert meta["progress"] == 1.0
    assert meta["ai_pending"] is False
    assert meta["date_from"] == "2026-09-19"
    assert meta["cache"]["record_count"] == 2

    profile, tenders = upstream
    assert profile.calls[0].request.headers["Authorization"] == "Bearer user-token-1"
    params = tenders.calls[0].request.url.params
    assert params["dateFrom"] == "2026-09-19"
    assert params["dateTo"] == "2026-10-19"


def test_second_run_reads_session_cache(client, upstream):
    client.post("/v1/matches", json=WINDOW, headers=AUTH)
    resp = client.post("/v1/matches", json=WINDOW, headers=AUTH)

    assert resp.json()["meta"]["from_cache"] is True
    profile, tenders = upstream
    assert tenders.call_count == 1
    assert profile.call_count == 2


def test_sessions_are_per_token(client, upstream):
    client.post("/v1/matches", json=WINDOW, headers=AUTH)
    other = {"Authorization": "Bearer someone-else"}
    resp = client.post("/v1/matches", json=WINDOW, headers=other)

    assert resp.json()["meta"]["from_cache"] is False
    _, tenders = upstream
    assert tenders.call_count == 2


def test_min_score_filter_in_body(client, upstream):
    resp = client.post(
        "/v1/matches",
        json={**WINDOW, "filters": {"min_score": 1000, "sort_key": "score-desc"}},
        headers=AUTH,
    )
    assert resp.json()["data"] == []
    assert resp.json()["meta"]["total_count"] == 0


def test_keywords_match_any_word(client, upstream):
    resp = client.post(
        "/v1/matches",
        json={**WINDOW, "filters": {"keywords": "diagnostic scaffolding"}},
        headers=AUTH,
    )
    assert [m["record"]["id"] for m in resp.json()["data"]] == ["ocds-a"]

    resp = client.get("/v1/matches", params={"keywords": "scaffolding hospitals"}, headers=AUTH)
    assert [m["record"]["id"] for m in resp.json()["data"]] == ["ocds-a"]


def test_get_views_current_session(client, upstream):
    client.post("/v1/matches", json=WINDOW, headers=AUTH)

    resp = client.get("/v1/matches", params={"province": "Gauteng"}, headers=AUTH)
    assert [m["record"]["id"] for m in resp.json()["data"]] == ["ocds-a"]

    resp = client.get("/v1/matches", params={"province": "Limpopo"}, headers=AUTH)
    assert resp.json()["data"] == []


def test_get_before_any_run_is_empty(client):
    resp = client.get("/v1/matches", headers=AUTH)
    assert resp.status_code == 200
    assert resp.json()["data"] == []
    assert resp.json()["meta"]["records_scanned"] == 0
