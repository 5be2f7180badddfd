"""
tests/test_transforms/test_profile.py — Tests for profile attribute probing.
"""

from __future__ import annotations

import pytest

from tendermatch_engine.transforms.profile import (
    PROFILE_FIELDS,
    ResolvedProfile,
    as_list,
    business_strengths,
    display_name,
    extract_keywords,
    resolve,
)


class TestResolve:
    def test_first_non_empty_path_wins(self):
        profile = {"company": {"province": ""}, "user": {"province": "Limpopo"}}
        assert resolve(profile, "location") == "Limpopo"

    def test_fallback_order_is_table_order(self):
        profile = {"location": "Free State", "startup": {"location": "North West"}}
        assert resolve(profile, "location") == "North West"

    def test_all_empty_returns_none(self):
        assert resolve({}, "industry") is None
        assert resolve(None, "industry") is None

    def test_unknown_attribute_raises(self):
        with pytest.raises(KeyError):
            resolve({}, "favourite_colour")

    def test_table_covers_scoring_attributes(self):
        for attribute in ("industry", "sectors", "skills", "location", "categories"):
            assert PROFILE_FIELDS[attribute]


class TestKeywords:
    def test_company_profile(self, company_profile: dict):
        assert extract_keywords(company_profile) == (
            "medical",
            "devices",
            "equipment",
            "maintenance",
            "procurement",
            "logistics",
        )

    def test_short_tokens_dropped(self, startup_profile: dict):
        keywords = extract_keywords(startup_profile)
        assert "ict" not in keywords
        assert "software" in keywords
        assert "cyber" in keywords

    def test_duplicates_removed(self):
        profile = {"industry": "Solar solar SOLAR", "skills": ["solar installs"]}
        assert extract_keywords(profile) == ("solar", "installs")

    def test_empty_profile(self):
        assert extract_keywords({}) == ()


class TestResolvedProfile:
    def test_from_company_profile(self, company_profile: dict):
        resolved = ResolvedProfile.from_raw(company_profile)
        assert resolved.location == "Gauteng"
        assert resolved.categories == ("goods",)
        assert not resolved.is_empty

    def test_comma_separated_categories(self, startup_profile: dict):
        resolved = ResolvedProfile.from_raw(startup_profile)
        assert resolved.categories == ("services", "works")
        assert resolved.location == "Western Cape"

    def test_non_string_location_ignored(self):
        assert ResolvedProfile.from_raw({"location": ["Gauteng"]}).location is None

    def test_empty(self):
        assert ResolvedProfile.from_raw({}).is_empty


class TestDisplay:
    def test_first_and_last_name(self, company_profile: dict):
        assert display_name(company_profile) == "Thandi Mokoena"

    def test_email_local_part(self, startup_profile: dict):
        assert display_name(startup_profile) == "founder"

    def test_company_name_before_email(self):
        profile = {"company": {"name": "Acme"}, "email": "a@b.c"}
        assert display_name(profile) == "Acme"

    def test_fallback(self):
        assert display_name({}) == "there"

    def test_business_strengths(self, company_profile: dict):
        strengths = dict(business_strengths(company_profile))
        assert strengths["Industry"] == "Medical devices"
        assert strengths["Location"] == "Gauteng"
        assert strengths["Categories"] == "goods"
        assert "Expertise" not in strengths

    def test_as_list(self):
        assert as_list(["a", "", 3, "b"]) == ["a", "b"]
        assert as_list(" x , y ,") == ["x", "y"]
        assert as_list(None) == []
