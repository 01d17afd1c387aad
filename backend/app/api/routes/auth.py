"""
Identity provider routes under /api/auth (always exempt from the request gate).

GET  /signin/discord   → redirect to Discord with a signed state
GET  /callback/discord → verify state, exchange code, check allow-list, set session cookie
POST /signout          → clear session cookie
GET  /session          → current session subject, or {}
"""

import logging
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from app.api.deps import SettingsDep
from app.core.gate import AUTH_PREFIX, SIGNIN_PATH
from app.core.identity import (
    OAuthError,
    authorize_url,
    create_oauth_state,
    fetch_discord_identity,
    is_allowed_identity,
    parse_oauth_state,
)
from app.core.security import (
    OAUTH_STATE_COOKIE_NAME,
    SESSION_COOKIE_NAME,
    create_session_token,
    verify_session,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _signin_error(error: str) -> RedirectResponse:
    resp = RedirectResponse(
        url=f"{SIGNIN_PATH}?{urlencode({'error': error})}", status_code=307
    )
    resp.delete_cookie(OAUTH_STATE_COOKIE_NAME, path=AUTH_PREFIX)
    return resp


@router.get("/signin/discord")
async def signin_discord(
    settings: SettingsDep, callbackUrl: str | None = None
) -> RedirectResponse:
    state, nonce = create_oauth_state(callbackUrl, settings)
    resp = RedirectResponse(url=authorize_url(state, settings), status_code=307)
    resp.set_cookie(
        OAUTH_STATE_COOKIE_NAME,
        nonce,
        max_age=600,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path=AUTH_PREFIX,
    )
    return resp


@router.get("/callback/discord")
async def callback_discord(
    request: Request,
    settings: SettingsDep,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
) -> RedirectResponse:
    if error:
        logger.info("Discord returned error on callback: %s", error)
        return _signin_error("AccessDenied")

    oauth_state = parse_oauth_state(
        state, request.cookies.get(OAUTH_STATE_COOKIE_NAME), settings
    )
    if oauth_state is None or not code:
        logger.warning("Rejected OAuth callback with missing/invalid state or code")
        return _signin_error("OAuthCallback")

    try:
        discord_id = await fetch_discord_identity(code, settings)
    except OAuthError:
        logger.exception("Discord code exchange failed")
        return _signin_error("OAuthCallback")

    if not is_allowed_identity(discord_id, settings):
        logger.warning("Sign-in refused for Discord user %s", discord_id)
        return _signin_error("AccessDenied")

    logger.info("Signed in Discord user %s", discord_id)
    resp = RedirectResponse(url=oauth_state.callback_url, status_code=307)
    resp.delete_cookie(OAUTH_STATE_COOKIE_NAME, path=AUTH_PREFIX)
    resp.set_cookie(
        SESSION_COOKIE_NAME,
        create_session_token(discord_id, settings),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )
    return resp


@router.post("/signout")
async def signout() -> RedirectResponse:
    resp = RedirectResponse(url=SIGNIN_PATH, status_code=303)
    resp.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return resp


@router.get("/session")
async def session_info(request: Request, settings: SettingsDep) -> dict[str, Any]:
    subject = verify_session(request, settings)
    if not subject:
        return {}
    return {"user": {"id": subject}}
