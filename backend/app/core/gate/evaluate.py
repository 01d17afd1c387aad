"""
Request gate: decide pass/deny for every inbound request before any handler runs.

Flow: test-mode bypass -> route lookup -> session (protected rules only) -> method check.
"""

import logging
from collections.abc import Callable

from starlette.requests import Request

from app.core.config import Settings
from app.core.gate.decision import (
    Allow,
    Decision,
    DenyMethodNotAllowed,
    DenyUnauthorized,
    DenyUnknownRoute,
)
from app.core.gate.routes import is_api_path, match_route

_logger = logging.getLogger(__name__)

SessionVerifier = Callable[[Request], str | None]


def _callback_url(request: Request) -> str:
    """Original path plus query string, so sign-in can return the user there."""
    path = request.url.path or "/"
    query = request.url.query
    return f"{path}?{query}" if query else path


def _safe_verify(verify_session: SessionVerifier, request: Request) -> str | None:
    """Run the verifier; any failure counts as no session."""
    try:
        return verify_session(request)
    except Exception:
        _logger.warning(
            "Session verification failed on %s %s",
            request.method,
            request.url.path,
            exc_info=True,
        )
        return None


def evaluate(
    request: Request,
    *,
    settings: Settings,
    verify_session: SessionVerifier,
) -> Decision:
    """
    Return the gate decision for request.

    - PLAYWRIGHT_TEST set → Allow without calling verify_session.
    - Exempt rule → no session lookup; only the method check applies.
    - Protected rule with no valid session → DenyUnauthorized (401 JSON for
      API paths, 307 to the sign-in page otherwise).
    - Declared method differs from request method → DenyMethodNotAllowed.
    - Authenticated API path with no declared rule → DenyUnknownRoute.
    """
    if settings.PLAYWRIGHT_TEST:
        return Allow()

    path = request.url.path or "/"
    method = (request.method or "").upper()
    rule = match_route(path)

    subject: str | None = None
    if rule.requires_auth:
        subject = _safe_verify(verify_session, request)
        if not subject:
            _logger.debug("Unauthenticated %s %s (rule=%s)", method, path, rule.name)
            return DenyUnauthorized(api=is_api_path(path), callback_url=_callback_url(request))

    if not rule.declared:
        _logger.warning("No route rule declared for %s %s; denying", method, path)
        return DenyUnknownRoute(path=path)

    if rule.method is not None and method != rule.method:
        _logger.debug("Method %s not allowed on %s (rule=%s)", method, path, rule.name)
        return DenyMethodNotAllowed(method=method, allowed=rule.method)

    return Allow(subject=subject)
