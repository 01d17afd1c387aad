import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError
from starlette.requests import Request

from app.core.config import Settings

_logger = logging.getLogger(__name__)


ALGORITHM = "HS256"

SESSION_COOKIE_NAME = "session_token"
OAUTH_STATE_COOKIE_NAME = "oauth_state"

# JWT token type claims to prevent cross-use between session cookies and OAuth state
TOKEN_TYPE_SESSION = "session"
TOKEN_TYPE_OAUTH_STATE = "oauth_state"

# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------


def create_access_token(
    subject: str | Any,
    expires_delta: timedelta,
    secret_key: str,
    token_type: str = TOKEN_TYPE_SESSION,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode: dict[str, Any] = {"exp": expire, "sub": str(subject), "type": token_type}
    if extra_claims:
        to_encode.update(extra_claims)
    encoded_jwt = jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)
    return encoded_jwt


def decode_token(
    token: str, secret_key: str, token_type: str = TOKEN_TYPE_SESSION
) -> dict[str, Any] | None:
    """Decode and verify a token. Returns the claims, or None for any invalid token."""
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[ALGORITHM],
            options={"verify_exp": True, "require": ["exp", "sub"]},
        )
    except InvalidTokenError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def create_session_token(subject: str, settings: Settings) -> str:
    return create_access_token(
        subject,
        expires_delta=timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS),
        secret_key=settings.SECRET_KEY,
    )


# ---------------------------------------------------------------------------
# Session verification (used by the request gate)
# ---------------------------------------------------------------------------


def _extract_token(request: Request) -> str | None:
    """Session cookie first, then Authorization: Bearer <token>."""
    token = (request.cookies.get(SESSION_COOKIE_NAME) or "").strip()
    if token:
        return token
    auth = (request.headers.get("Authorization") or "").strip()
    if auth.startswith("Bearer "):
        token = auth[7:].strip()
    return token or None


def verify_session(request: Request, settings: Settings) -> str | None:
    """
    Return the verified subject (Discord user id) for the request, or None.

    None covers: no token, malformed token, bad signature, expired token,
    wrong token type, and a subject other than the single allowed identity.
    Pure local check; no network I/O.
    """
    token = _extract_token(request)
    if not token:
        return None

    payload = decode_token(token, settings.SECRET_KEY)
    if payload is None:
        return None

    subject = payload.get("sub")
    if not subject or not isinstance(subject, str):
        return None
    if not settings.ALLOWED_DISCORD_USER_ID or subject != settings.ALLOWED_DISCORD_USER_ID:
        _logger.info("Session token subject %s is not the allowed identity", subject)
        return None
    return subject
