"""
Discord OAuth2 identity provider.

Sign-in is limited to the single Discord account named by ALLOWED_DISCORD_USER_ID;
when that is not configured every sign-in is refused.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from urllib.parse import urlencode

import httpx

from app.core.config import Settings
from app.core.gate import AUTH_PREFIX
from app.core.security import (
    TOKEN_TYPE_OAUTH_STATE,
    create_access_token,
    decode_token,
)

logger = logging.getLogger(__name__)

DISCORD_AUTHORIZE_URL = "https://discord.com/oauth2/authorize"
DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"
DISCORD_USER_URL = "https://discord.com/api/users/@me"
DISCORD_SCOPE = "identify"

OAUTH_STATE_TTL = timedelta(minutes=10)


class OAuthError(Exception):
    """Code exchange or profile fetch against the provider failed."""


@dataclass(frozen=True)
class OAuthState:
    nonce: str
    callback_url: str


def safe_callback_url(value: str | None) -> str:
    """Only same-site relative paths are honoured as post-sign-in targets."""
    if not value or not value.startswith("/") or value.startswith("//"):
        return "/"
    if "\\" in value:
        return "/"
    return value


def discord_redirect_uri(settings: Settings) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}{AUTH_PREFIX}/callback/discord"


def create_oauth_state(callback_url: str | None, settings: Settings) -> tuple[str, str]:
    """Return (signed state token, nonce). The nonce also goes into a cookie."""
    nonce = secrets.token_urlsafe(16)
    token = create_access_token(
        nonce,
        expires_delta=OAUTH_STATE_TTL,
        secret_key=settings.SECRET_KEY,
        token_type=TOKEN_TYPE_OAUTH_STATE,
        extra_claims={"cb": safe_callback_url(callback_url)},
    )
    return token, nonce


def parse_oauth_state(
    state: str | None, nonce_cookie: str | None, settings: Settings
) -> OAuthState | None:
    """Verify the state token and that it belongs to this browser (nonce cookie)."""
    if not state or not nonce_cookie:
        return None
    payload = decode_token(state, settings.SECRET_KEY, token_type=TOKEN_TYPE_OAUTH_STATE)
    if payload is None:
        return None
    nonce = payload.get("sub")
    if not isinstance(nonce, str) or not secrets.compare_digest(nonce, nonce_cookie):
        return None
    return OAuthState(nonce=nonce, callback_url=safe_callback_url(payload.get("cb")))


def authorize_url(state: str, settings: Settings) -> str:
    query = urlencode(
        {
            "client_id": settings.DISCORD_CLIENT_ID,
            "redirect_uri": discord_redirect_uri(settings),
            "response_type": "code",
            "scope": DISCORD_SCOPE,
            "state": state,
            "prompt": "none",
        }
    )
    return f"{DISCORD_AUTHORIZE_URL}?{query}"


def is_allowed_identity(discord_id: str | None, settings: Settings) -> bool:
    allowed = settings.ALLOWED_DISCORD_USER_ID
    if not allowed:
        logger.warning("ALLOWED_DISCORD_USER_ID is not set; refusing sign-in")
        return False
    return bool(discord_id) and discord_id == allowed


async def fetch_discord_identity(
    code: str,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    Exchange an authorization code and return the caller's Discord user id.

    Raises OAuthError on any transport, HTTP, or payload problem.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=settings.OAUTH_HTTP_TIMEOUT_SECONDS)
    try:
        token_resp = await client.post(
            DISCORD_TOKEN_URL,
            data={
                "client_id": settings.DISCORD_CLIENT_ID,
                "client_secret": settings.DISCORD_CLIENT_SECRET,
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": discord_redirect_uri(settings),
            },
            headers={"Accept": "application/json"},
        )
        token_resp.raise_for_status()
        body = token_resp.json()
        access_token = body.get("access_token") if isinstance(body, dict) else None
        if not access_token or not isinstance(access_token, str):
            raise OAuthError("Token response did not include an access_token")

        user_resp = await client.get(
            DISCORD_USER_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        user_resp.raise_for_status()
        profile = user_resp.json()
        discord_id = profile.get("id") if isinstance(profile, dict) else None
        if not discord_id:
            raise OAuthError("User response did not include an id")
        return str(discord_id)
    except httpx.HTTPError as e:
        raise OAuthError(f"Discord request failed: {e}") from e
    except ValueError as e:
        raise OAuthError(f"Discord returned invalid JSON: {e}") from e
    finally:
        if owns_client:
            await client.aclose()
