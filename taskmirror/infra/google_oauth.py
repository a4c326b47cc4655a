from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from taskmirror.domain.errors import AuthRefreshFailed

from .google_http import is_success, safe_google_error_message

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN_SECONDS = 3600


@dataclass(frozen=True)
class RefreshedToken:
    access_token: str
    expires_in: int


def _coerce_expires_in_seconds(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_EXPIRES_IN_SECONDS
    if isinstance(value, int | float):
        return int(value) if value > 0 else DEFAULT_EXPIRES_IN_SECONDS
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip()) or DEFAULT_EXPIRES_IN_SECONDS
    return DEFAULT_EXPIRES_IN_SECONDS


class GoogleTokenClient:
    """Refresh-token exchange against Google's OAuth token endpoint."""

    def __init__(
        self,
        *,
        token_url: str,
        client_id: str,
        client_secret: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._timeout = timeout
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def refresh(self, refresh_token: str) -> RefreshedToken:
        if not refresh_token.strip():
            raise AuthRefreshFailed("No refresh token stored; reconnect Google Calendar")

        request = self._http_client.post(
            self._token_url,
            data={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
            headers={"Accept": "application/json"},
        )
        try:
            response = await asyncio.wait_for(request, self._timeout)
        except TimeoutError as exc:
            raise AuthRefreshFailed(
                f"Google OAuth token refresh timed out after {self._timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise AuthRefreshFailed(f"Google OAuth token refresh request failed: {exc}") from exc

        if not is_success(response):
            raise AuthRefreshFailed(
                "Google OAuth token refresh failed "
                f"({response.status_code}): {safe_google_error_message(response)}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthRefreshFailed("Google OAuth token endpoint returned invalid JSON") from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token.strip():
            raise AuthRefreshFailed(
                "Google OAuth token response is missing a non-empty access_token"
            )

        expires_in = _coerce_expires_in_seconds(payload.get("expires_in"))
        logger.debug("Access token refreshed expires_in=%s", expires_in)
        return RefreshedToken(access_token=access_token.strip(), expires_in=expires_in)

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()
