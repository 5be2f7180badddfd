"""
transforms/profile.py — Resolve logical attributes from a free-form profile.

The profile service returns nested JSON whose shape differs between
accounts (company-style, startup-style, flat). Each logical attribute is
resolved by trying an ordered table of accessors and taking the first
non-empty value. The table is data, so the fallback order is visible and
testable in one place.

Usage:
    from tendermatch_engine.transforms.profile import resolve, ResolvedProfile

    location = resolve(profile, "location")
    resolved = ResolvedProfile.from_raw(profile)
    resolved.keywords  # lowercase tokens longer than 3 chars, first-seen order
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tendermatch_engine.transforms.normalize import Path, dig, is_present

Accessor = Callable[[Any], Any]


def _path(*steps: str | int) -> Accessor:
    def accessor(data: Any) -> Any:
        return dig(data, *steps)

    accessor.__qualname__ = "path:" + ".".join(str(s) for s in steps)
    return accessor


def _paths(*paths: Path) -> tuple[Accessor, ...]:
    return tuple(_path(*p) for p in paths)


# ---------------------------------------------------------------------------
# Fallback table: attribute -> accessors, tried in order
# ---------------------------------------------------------------------------
PROFILE_FIELDS: Mapping[str, tuple[Accessor, ...]] = {
    "industry": _paths(("company", "industry"), ("startup", "industry"), ("industry",)),
    "services": _paths(("company", "services"), ("services",)),
    "products": _paths(("company", "products"), ("products",)),
    "sectors": _paths(
        ("profile", "industry_sectors"),
        ("company", "sectors"),
        ("industry_sectors",),
    ),
    "skills": _paths(("user", "skills"), ("profile", "skills"), ("skills",)),
    "expertise": _paths(("user", "expertise"), ("profile", "expertise")),
    "interests": _paths(("profile", "interests"), ("user", "interests")),
    "bio": _paths(("profile", "bio"), ("user", "bio"), ("bio",)),
    "location": _paths(
        ("company", "province"),
        ("user", "province"),
        ("startup", "location"),
        ("location",),
    ),
    "categories": _paths(
        ("company", "categories"),
        ("profile", "categories"),
        ("categories",),
    ),
    "stage": _paths(("startup", "stage"), ("stage",)),
    "company_name": _paths(
        ("company", "name"),
        ("company", "company_name"),
        ("companyName",),
    ),
    "email": _paths(("user", "email"), ("email",)),
}

# Attributes whose text feeds the keyword set
KEYWORD_FIELDS: tuple[str, ...] = (
    "industry",
    "sectors",
    "services",
    "products",
    "skills",
    "expertise",
)

MIN_KEYWORD_LENGTH = 4

_NAME_FIELDS: Mapping[str, tuple[Accessor, ...]] = {
    "first": _paths(
        ("user", "first_name"),
        ("user", "firstName"),
        ("first_name",),
        ("firstName",),
        ("profile", "first_name"),
    ),
    "last": _paths(
        ("user", "last_name"),
        ("user", "lastName"),
        ("last_name",),
        ("lastName",),
        ("profile", "last_name"),
    ),
    "full": _paths(
        ("user", "full_name"),
        ("user", "fullName"),
        ("full_name",),
        ("fullName",),
        ("profile", "full_name"),
    ),
}


def _first(profile: Any, accessors: tuple[Accessor, ...]) -> Any:
    for accessor in accessors:
        value = accessor(profile)
        if is_present(value):
            return value
    return None


def resolve(profile: Any, attribute: str) -> Any:
    """
    First non-empty value for *attribute*, or None.

    Raises:
        KeyError: *attribute* is not in PROFILE_FIELDS.
    """
    return _first(profile, PROFILE_FIELDS[attribute])


def as_text(value: Any) -> str:
    """Flatten a string or list of strings to one space-joined string."""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return " ".join(v for v in value if isinstance(v, str))
    return ""


def as_list(value: Any) -> list[str]:
    """A list value as a list of strings; a comma-separated string is split."""
    if isinstance(value, (list, tuple)):
        return [v for v in value if isinstance(v, str) and v]
    if isinstance(value, str) and value.strip():
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


def extract_keywords(profile: Any) -> tuple[str, ...]:
    """
    Lowercased, whitespace-split tokens of the keyword fields, longer than 3 chars.

    De-duplicated, in first-seen order (KEYWORD_FIELDS order, then text order).
    """
    tokens: dict[str, None] = {}
    for attribute in KEYWORD_FIELDS:
        text = as_text(resolve(profile, attribute)).lower()
        for token in re.split(r"\s+", text):
            if len(token) >= MIN_KEYWORD_LENGTH:
                tokens.setdefault(token, None)
    return tuple(tokens)


@dataclass(frozen=True)
class ResolvedProfile:
    """The attributes the scoring engine reads, resolved once per profile."""

    keywords: tuple[str, ...] = ()
    location: str | None = None
    categories: tuple[str, ...] = ()
    raw: Any = field(default=None, compare=False, repr=False)

    @classmethod
    def from_raw(cls, profile: Any) -> "ResolvedProfile":
        location = resolve(profile, "location")
        return cls(
            keywords=extract_keywords(profile),
            location=location if isinstance(location, str) else None,
            categories=tuple(as_list(resolve(profile, "categories"))),
            raw=profile,
        )

    @property
    def is_empty(self) -> bool:
        return not (self.keywords or self.location or self.categories)


def display_name(profile: Any) -> str:
    """Best human name for greeting the user; "there" when nothing fits."""
    first = _first(profile, _NAME_FIELDS["first"])
    last = _first(profile, _NAME_FIELDS["last"])
    if isinstance(first, str) and isinstance(last, str):
        return f"{first.strip()} {last.strip()}"

    full = _first(profile, _NAME_FIELDS["full"])
    if isinstance(full, str):
        return full.strip()

    company = resolve(profile, "company_name")
    if isinstance(company, str):
        return company.strip()

    email = resolve(profile, "email")
    if isinstance(email, str) and "@" in email:
        return email.split("@", 1)[0]

    return "there"


def business_strengths(profile: Any) -> list[tuple[str, str]]:
    """Labelled profile facts, in display order, for a profile summary."""
    strengths: list[tuple[str, str]] = []
    for label, attribute in (
        ("Industry", "industry"),
        ("Services", "services"),
        ("Location", "location"),
        ("Categories", "categories"),
        ("Expertise", "expertise"),
    ):
        value = resolve(profile, attribute)
        text = ", ".join(as_list(value)) if isinstance(value, list) else as_text(value)
        if text.strip():
            strengths.append((label, text.strip()))
    return strengths
