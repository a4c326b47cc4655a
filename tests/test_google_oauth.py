from __future__ import annotations

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from taskmirror.domain.errors import AuthRefreshFailed
from taskmirror.infra.google_oauth import GoogleTokenClient

TOKEN_URL = "https://oauth.test/token"


def _client(handler) -> GoogleTokenClient:
    return GoogleTokenClient(
        token_url=TOKEN_URL,
        client_id="client-id",
        client_secret="client-secret",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_refresh_posts_form_encoded_grant() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"access_token": "new-token", "expires_in": 1800})

    refreshed = asyncio.run(_client(handler).refresh("refresh-1"))

    assert refreshed.access_token == "new-token"
    assert refreshed.expires_in == 1800
    request = seen[0]
    assert str(request.url) == TOKEN_URL
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    form = parse_qs(request.content.decode())
    assert form == {
        "client_id": ["client-id"],
        "client_secret": ["client-secret"],
        "refresh_token": ["refresh-1"],
        "grant_type": ["refresh_token"],
    }


def test_missing_expires_in_defaults_to_an_hour() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"access_token": "new-token"})

    assert asyncio.run(_client(handler).refresh("refresh-1")).expires_in == 3600


def test_rejected_refresh_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Token has been revoked."},
        )

    with pytest.raises(AuthRefreshFailed) as excinfo:
        asyncio.run(_client(handler).refresh("refresh-1"))
    assert "invalid_grant" in str(excinfo.value)


def test_response_without_access_token_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"expires_in": 3600})

    with pytest.raises(AuthRefreshFailed):
        asyncio.run(_client(handler).refresh("refresh-1"))


def test_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AuthRefreshFailed):
        asyncio.run(_client(handler).refresh("refresh-1"))


def test_empty_refresh_token_is_rejected_without_a_request() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(AuthRefreshFailed):
        asyncio.run(_client(handler).refresh("  "))


def test_slow_token_endpoint_times_out() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json={"access_token": "late"})

    client = GoogleTokenClient(
        token_url=TOKEN_URL,
        client_id="client-id",
        client_secret="client-secret",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        timeout=0.05,
    )

    with pytest.raises(AuthRefreshFailed) as excinfo:
        asyncio.run(client.refresh("refresh-1"))
    assert "timed out" in str(excinfo.value)
