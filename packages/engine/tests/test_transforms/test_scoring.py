"""
tests/test_transforms/test_scoring.py — Tests for deterministic match scoring.
"""

from __future__ import annotations

import pytest

from tendermatch_engine.transforms.normalize import normalize
from tendermatch_engine.transforms.profile import ResolvedProfile
from tendermatch_engine.transforms.scoring import (
    CATEGORY_POINTS,
    KEYWORD_POINTS,
    LOCATION_POINTS,
    score,
    score_all,
)


def test_medical_equipment_example(make_record, now):
    record = make_record(
        "Supply of Medical Equipment",
        description="MRI CT scanners",
        province="Gauteng",
        closes_in_days=10,
    )
    profile = {"industry": "Medical devices", "location": "Gauteng"}

    points, reasons = score(record, profile, now=now)

    assert points == 10 + 20 + 15
    assert reasons == [
        "Matches keyword: medical",
        "Located in Gauteng",
        "Good timeline: 10 days to close",
    ]


def test_full_fixture_release(etenders_page, company_profile, now):
    record = normalize(etenders_page["results"][0])
    points, reasons = score(record, company_profile, now=now)

    assert points == 2 * KEYWORD_POINTS + LOCATION_POINTS + CATEGORY_POINTS + 15
    assert reasons[0] == "Matches keyword: medical"
    assert reasons[1] == "Matches keyword: equipment"
    assert reasons[-1] == "Good timeline: 9 days to close"


def test_empty_profile_scores_zero(make_record, now):
    record = make_record("Anything", province="Gauteng", category="goods")
    assert score(record, {}, now=now) == (0, [])


def test_location_is_case_sensitive(make_record, now):
    record = make_record("x", province="gauteng")
    assert score(record, {"location": "Gauteng"}, now=now).score == 0


def test_category_needs_list_membership(make_record, now):
    record = make_record("x", category="works")
    profile = {"categories": ["goods", "works"]}
    assert score(record, profile, now=now) == (CATEGORY_POINTS, ["Category match: works"])


@pytest.mark.parametrize(
    "days, expected_points, reason",
    [
        (30.5, 0, None),
        (29.5, 15, "Good timeline: 29 days to close"),
        (8.5, 15, "Good timeline: 8 days to close"),
        (7.5, 5, "Closes soon: 7 days"),
        (1.5, 5, "Closes soon: 1 days"),
        (0.5, 0, None),
        (-3, 0, None),
    ],
)
def test_timeliness_buckets(make_record, now, days, expected_points, reason):
    record = make_record("x", closes_in_days=days)
    points, reasons = score(record, {}, now=now)
    assert points == expected_points
    assert reasons == ([reason] if reason else [])


def test_score_is_unbounded(make_record, now):
    record = make_record(
        "solar panels inverters batteries installation maintenance",
        province="Gauteng",
        category="goods",
        closes_in_days=14,
    )
    profile = {
        "industry": "solar panels inverters batteries installation maintenance",
        "location": "Gauteng",
        "categories": ["goods"],
    }
    assert score(record, profile, now=now).score == 6 * 10 + 20 + 30 + 15


def test_accepts_resolved_profile(make_record, now):
    record = make_record("x", province="Gauteng")
    resolved = ResolvedProfile.from_raw({"location": "Gauteng"})
    assert score(record, resolved, now=now).score == LOCATION_POINTS


class TestScoreAll:
    def test_excludes_zero_and_sorts_descending(self, make_record, now):
        records = [
            make_record("nothing"),
            make_record("x", province="Gauteng"),
            make_record("x", province="Gauteng", category="goods"),
        ]
        profile = {"location": "Gauteng", "categories": ["goods"]}

        matches = score_all(records, profile, now=now)

        assert [m.score for m in matches] == [50, 20]
        assert matches[0].record is records[2]

    def test_ties_keep_input_order(self, make_record, now):
        records = [make_record("a", province="Gauteng"), make_record("b", province="Gauteng")]
        matches = score_all(records, {"location": "Gauteng"}, now=now)
        assert [m.record.title for m in matches] == ["a", "b"]

    def test_fresh_results_each_pass(self, make_record, now):
        records = [make_record("x", province="Gauteng")]
        first = score_all(records, {"location": "Gauteng"}, now=now)
        second = score_all(records, {"location": "Gauteng"}, now=now)
        assert first == second
        assert first[0] is not second[0]
