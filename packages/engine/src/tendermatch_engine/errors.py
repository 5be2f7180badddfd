"""
errors.py — Exception types raised by the matching engine.

Only InvalidDateRangeError and ProfileUnavailableError are meant to reach
the user. SourceError and AIServiceError are raised by the clients and
absorbed by the progressive loader and the AI overlay respectively.
"""

from __future__ import annotations


class TenderMatchError(Exception):
    """Base class for engine errors."""


class InvalidDateRangeError(TenderMatchError, ValueError):
    """The requested date window is malformed or inverted."""


class ProfileUnavailableError(TenderMatchError):
    """The mandatory profile fetch failed; matching cannot start."""


class SourceError(TenderMatchError):
    """A tender page could not be fetched or decoded."""

    def __init__(self, message: str, *, page: int | None = None) -> None:
        super().__init__(message)
        self.page = page


class AIServiceError(TenderMatchError):
    """The reasoning service failed or returned an unusable answer."""


class RecordNotFoundError(TenderMatchError, LookupError):
    """No private tender exists with the requested ocid."""
