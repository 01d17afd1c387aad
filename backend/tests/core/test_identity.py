"""Unit tests for the Discord identity provider helpers."""

import asyncio
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.core.identity import (
    OAuthError,
    authorize_url,
    create_oauth_state,
    fetch_discord_identity,
    is_allowed_identity,
    parse_oauth_state,
    safe_callback_url,
)
from tests.utils.settings import ALLOWED_ID, make_settings


def test_safe_callback_url() -> None:
    assert safe_callback_url("/") == "/"
    assert safe_callback_url("/dashboard?tab=1") == "/dashboard?tab=1"
    assert safe_callback_url(None) == "/"
    assert safe_callback_url("") == "/"
    assert safe_callback_url("https://evil.example/") == "/"
    assert safe_callback_url("//evil.example/") == "/"
    assert safe_callback_url("/\\evil.example") == "/"


def test_oauth_state_roundtrip() -> None:
    settings = make_settings()
    state, nonce = create_oauth_state("/dashboard", settings)
    parsed = parse_oauth_state(state, nonce, settings)
    assert parsed is not None
    assert parsed.callback_url == "/dashboard"
    assert parsed.nonce == nonce


def test_oauth_state_rejects_wrong_nonce() -> None:
    settings = make_settings()
    state, _ = create_oauth_state("/", settings)
    assert parse_oauth_state(state, "other-nonce", settings) is None
    assert parse_oauth_state(state, None, settings) is None
    assert parse_oauth_state(None, "x", settings) is None


def test_oauth_state_sanitises_callback() -> None:
    settings = make_settings()
    state, nonce = create_oauth_state("https://evil.example/", settings)
    parsed = parse_oauth_state(state, nonce, settings)
    assert parsed is not None
    assert parsed.callback_url == "/"


def test_authorize_url() -> None:
    settings = make_settings()
    url = urlparse(authorize_url("STATE", settings))
    q = parse_qs(url.query)
    assert url.netloc == "discord.com"
    assert q["client_id"] == ["discord-client-id"]
    assert q["redirect_uri"] == ["http://testserver/api/auth/callback/discord"]
    assert q["scope"] == ["identify"]
    assert q["state"] == ["STATE"]
    assert q["response_type"] == ["code"]


def test_is_allowed_identity() -> None:
    settings = make_settings()
    assert is_allowed_identity(ALLOWED_ID, settings) is True
    assert is_allowed_identity("1", settings) is False
    assert is_allowed_identity(None, settings) is False
    assert is_allowed_identity(ALLOWED_ID, make_settings(ALLOWED_DISCORD_USER_ID="")) is False


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_fetch_discord_identity_success() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        if request.url.path == "/api/oauth2/token":
            assert b"code=the-code" in request.content
            return httpx.Response(200, json={"access_token": "at", "token_type": "Bearer"})
        if request.url.path.endswith("/users/@me"):
            assert request.headers["Authorization"] == "Bearer at"
            return httpx.Response(200, json={"id": ALLOWED_ID, "username": "owner"})
        return httpx.Response(404)

    async def run() -> str:
        async with _client(handler) as client:
            return await fetch_discord_identity("the-code", make_settings(), client)

    assert asyncio.run(run()) == ALLOWED_ID
    assert len(seen) == 2
    assert seen[0] == "/api/oauth2/token"


def test_fetch_discord_identity_token_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant"})

    async def run() -> str:
        async with _client(handler) as client:
            return await fetch_discord_identity("bad", make_settings(), client)

    with pytest.raises(OAuthError):
        asyncio.run(run())


def test_fetch_discord_identity_missing_access_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"token_type": "Bearer"})

    async def run() -> str:
        async with _client(handler) as client:
            return await fetch_discord_identity("code", make_settings(), client)

    with pytest.raises(OAuthError):
        asyncio.run(run())


def test_fetch_discord_identity_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    async def run() -> str:
        async with _client(handler) as client:
            return await fetch_discord_identity("code", make_settings(), client)

    with pytest.raises(OAuthError):
        asyncio.run(run())
