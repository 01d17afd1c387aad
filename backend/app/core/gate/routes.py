"""
Gate route table: ordered (pattern, rule) pairs, evaluated top to bottom, first match wins.

Unmatched paths fall back to one of two defaults:
- under the API prefix: protected, no declared method (authenticated callers get 404);
- anything else: a protected page, any method.

The table is built once at import time and never mutated.
"""

import re
from dataclasses import dataclass

API_PREFIX = "/api"
AUTH_PREFIX = f"{API_PREFIX}/auth"
SIGNIN_PATH = "/auth/signin"


@dataclass(frozen=True)
class RouteRule:
    name: str
    pattern: re.Pattern[str]
    method: str | None
    requires_auth: bool
    declared: bool = True


def _exact(path: str) -> re.Pattern[str]:
    """Match path with or without a trailing slash."""
    return re.compile(rf"^{re.escape(path)}/?$")


def _prefix(path: str) -> re.Pattern[str]:
    """Match path itself and anything below it."""
    return re.compile(rf"^{re.escape(path)}(?:/.*)?$")


ROUTE_RULES: tuple[RouteRule, ...] = (
    # Identity provider: sign-in start, OAuth callback, sign-out, session probe
    RouteRule("identity-provider", _prefix(AUTH_PREFIX), None, False),
    RouteRule("liveness", _exact(f"{API_PREFIX}/utils/liveness"), "GET", False),
    RouteRule("health-check", _exact(f"{API_PREFIX}/utils/health-check"), "GET", False),
    RouteRule("create-backup", _exact(f"{API_PREFIX}/backups/create"), "POST", True),
    RouteRule("delete-backup", _exact(f"{API_PREFIX}/backups/delete"), "DELETE", True),
    RouteRule("download-backup", _exact(f"{API_PREFIX}/backups/download"), "GET", True),
    RouteRule("list-backups", _exact(f"{API_PREFIX}/backups/list"), "GET", True),
    RouteRule("process-status", _exact(f"{API_PREFIX}/pm2/status"), "GET", True),
    RouteRule("signin-page", _exact(SIGNIN_PATH), None, False),
    RouteRule("static", _prefix("/static"), None, False),
    RouteRule("images", _prefix("/images"), None, False),
    RouteRule("favicon", _exact("/favicon.ico"), None, False),
    RouteRule("robots", _exact("/robots.txt"), None, False),
)

UNKNOWN_API_RULE = RouteRule(
    "unknown-api", _prefix(API_PREFIX), None, True, declared=False
)
PAGE_RULE = RouteRule("page", re.compile(r"^.*$"), None, True)


def is_api_path(path: str) -> bool:
    return path == API_PREFIX or path.startswith(f"{API_PREFIX}/")


def match_route(path: str) -> RouteRule:
    """Return the first rule whose pattern matches path, else the matching default."""
    for rule in ROUTE_RULES:
        if rule.pattern.match(path):
            return rule
    if is_api_path(path):
        return UNKNOWN_API_RULE
    return PAGE_RULE
