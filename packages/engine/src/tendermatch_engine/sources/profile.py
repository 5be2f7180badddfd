"""
sources/profile.py — Bearer-authenticated reader for the profile service.

The engine never handles login. It receives an opaque bearer token through a
CredentialProvider and forwards it to the profile service:

    GET {profile_service_url}?type=both
    Authorization: Bearer <token>

The response is free-form nested JSON (see transforms.profile for how it is
read). Any failure here is fatal for a match run, so every error is raised
as ProfileUnavailableError.

Usage:
    client = ProfileClient(http, settings.profile_service_url, StaticCredentials(token))
    profile = await client.fetch()
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from tendermatch_engine.errors import ProfileUnavailableError
from tendermatch_engine.sources.base import BaseSource


class CredentialProvider(Protocol):
    async def get_token(self) -> str | None: ...


class StaticCredentials:
    """A token handed in up front (CLI flag, API Authorization header)."""

    def __init__(self, token: str | None) -> None:
        self._token = token

    async def get_token(self) -> str | None:
        return self._token


class ProfileClient(BaseSource):
    name = "profile"

    def __init__(
        self,
        http: httpx.AsyncClient,
        url: str,
        credentials: CredentialProvider,
        *,
        timeout: float = 30.0,
    ) -> None:
        super().__init__(http, timeout=timeout)
        self._url = url.rstrip("/")
        self._credentials = credentials

    async def fetch(self) -> dict[str, Any]:
        """
        Fetch the caller's profile.

        Raises:
            ProfileUnavailableError: no token, network failure, non-2xx
                status, or a body that is not a JSON object.
        """
        token = await self._credentials.get_token()
        if not token:
            raise ProfileUnavailableError("no bearer token available for profile fetch")

        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        try:
            payload = await self._get_json(self._url, params={"type": "both"}, headers=headers)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            self._log.error("profile_fetch_failed", status=status)
            raise ProfileUnavailableError(
                f"Failed to fetch profile data: {status} {exc.response.reason_phrase}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            self._log.error("profile_fetch_failed", error=str(exc))
            raise ProfileUnavailableError(f"Failed to fetch profile data: {exc}") from exc

        if not isinstance(payload, dict):
            raise ProfileUnavailableError("profile service returned a non-object body")

        self._log.info("profile_fetched", keys=sorted(payload))
        return payload
