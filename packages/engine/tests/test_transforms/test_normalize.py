"""
tests/test_transforms/test_normalize.py — Tests for OCDS release normalization.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from tendermatch_shared.constants import NO_DESCRIPTION, PRIVATE_ID_PREFIX, UNTITLED

from tendermatch_engine.transforms.normalize import (
    dig,
    extract_documents,
    extract_results,
    extract_total,
    normalize,
    normalize_many,
    unwrap_release,
)


class TestDig:
    def test_nested_dicts_and_lists(self):
        data = {"a": {"b": [{"c": 1}]}}
        assert dig(data, "a", "b", 0, "c") == 1

    @pytest.mark.parametrize(
        "path",
        [("missing",), ("a", "b", 5), ("a", "b", "c"), ("a", "b", 0, "c", "d")],
    )
    def test_misses_return_none(self, path):
        assert dig({"a": {"b": [{"c": 1}]}}, *path) is None

    def test_non_container_root(self):
        assert dig(None, "a") is None
        assert dig("text", "a") is None


class TestNormalize:
    def test_full_release(self, etenders_page: dict):
        record = normalize(etenders_page["results"][0])

        assert record.id == "ocds-9t57fa-130001"
        assert record.title == "Supply of Medical Equipment"
        assert record.buyer_name == "Department of Health"
        assert record.province == "Gauteng"
        assert record.category == "goods"
        assert record.status == "active"
        assert record.closing_date.isoformat() == "2026-10-29T11:00:00+00:00"
        assert record.value_amount == Decimal("2500000")
        assert record.currency == "ZAR"
        assert record.procuring_entity == "Gauteng Department of Health"
        assert record.tags == ["tender"]
        assert record.briefing is not None
        assert record.briefing.compulsory is True
        assert record.briefing.venue == "Johannesburg"
        assert record.is_private is False

    def test_sparse_release_uses_fallbacks(self, etenders_page: dict):
        record = normalize(etenders_page["results"][1])

        assert record.title == "Security services"
        assert record.description == NO_DESCRIPTION
        assert record.category == "services"  # tender.category fallback
        assert record.closing_date is None    # unparseable date
        assert record.buyer_name is None
        assert record.documents == []
        assert record.briefing is None

    def test_empty_tender_block(self):
        record = normalize({"ocid": "ocds-x", "tender": None})
        assert record.title == UNTITLED
        assert record.description == NO_DESCRIPTION

    def test_wrong_types_do_not_raise(self):
        record = normalize(
            {
                "ocid": "ocds-x",
                "tender": {
                    "title": 42,
                    "tenderPeriod": "soon",
                    "documents": "none",
                    "value": {"amount": "lots"},
                },
                "awards": "n/a",
            }
        )
        assert record.title == "42"
        assert record.closing_date is None
        assert record.documents == []
        assert record.value_amount is None

    def test_release_id_used_when_ocid_missing(self):
        assert normalize({"id": "rel-1", "tender": {}}).id == "rel-1"

    def test_upstream_record_without_id_raises(self):
        with pytest.raises(ValueError):
            normalize({"tender": {"title": "x"}})

    def test_private_record_without_id_gets_prefixed_uuid(self):
        record = normalize({"tender": {"title": "Mine"}}, private=True)
        assert record.id.startswith(PRIVATE_ID_PREFIX)
        assert record.is_private is True

    def test_release_package_is_unwrapped(self):
        package = {"ocid": "ocds-pkg", "releases": [{"tender": {"title": "Inner"}}]}
        record = normalize(package)
        assert record.id == "ocds-pkg"
        assert record.title == "Inner"

    def test_briefing_without_session(self):
        record = normalize(
            {"ocid": "ocds-x", "tender": {"briefingSession": {"isSession": False}}}
        )
        assert record.briefing is None


class TestDocuments:
    def test_duplicate_urls_collapse_first_wins(self, etenders_page: dict):
        release = unwrap_release(etenders_page["results"][0])
        docs = extract_documents(release)

        urls = [d.url for d in docs]
        assert urls == ["https://example.gov.za/d1.pdf", "https://example.gov.za/p1.pdf"]
        assert docs[0].title == "Tender notice"
        assert docs[0].kind == "tenderNotice"

    def test_contract_documents_scanned(self):
        release = {
            "contracts": [
                {"documents": [{"url": "https://x/c1", "title": "Contract"}]},
                {"documents": None},
            ]
        }
        docs = extract_documents(release)
        assert [d.title for d in docs] == ["Contract"]

    def test_document_without_url_skipped(self):
        release = {"tender": {"documents": [{"title": "No link"}]}}
        assert extract_documents(release) == []

    def test_missing_title_gets_placeholder(self):
        release = {"tender": {"documents": [{"url": "https://x/1"}]}}
        assert extract_documents(release)[0].title == "Untitled Document"


class TestBatchHelpers:
    def test_normalize_many_drops_idless(self, etenders_page: dict):
        records = normalize_many(etenders_page["results"])
        assert [r.id for r in records] == ["ocds-9t57fa-130001", "ocds-9t57fa-130002"]

    @pytest.mark.parametrize(
        "payload, expected",
        [
            ({"results": [1, 2]}, [1, 2]),
            ({"data": [3]}, [3]),
            ({"releases": [4]}, [4]),
            ([5, 6], [5, 6]),
            ({"results": "oops"}, []),
            ("garbage", []),
        ],
    )
    def test_extract_results_shapes(self, payload, expected):
        assert extract_results(payload) == expected

    def test_extract_total(self):
        assert extract_total({"total": 120}) == 120
        assert extract_total({"totalReleases": 7}) == 7
        assert extract_total({"total": "many"}) is None
        assert extract_total([1, 2]) is None
