"""
Request gate: route table, decisions, evaluate, middleware.
"""

from app.core.gate.decision import (
    Allow,
    Decision,
    DenyMethodNotAllowed,
    DenyUnauthorized,
    DenyUnknownRoute,
)
from app.core.gate.evaluate import evaluate
from app.core.gate.middleware import GateMiddleware
from app.core.gate.routes import (
    API_PREFIX,
    AUTH_PREFIX,
    ROUTE_RULES,
    SIGNIN_PATH,
    RouteRule,
    is_api_path,
    match_route,
)

__all__ = [
    "API_PREFIX",
    "AUTH_PREFIX",
    "Allow",
    "Decision",
    "DenyMethodNotAllowed",
    "DenyUnauthorized",
    "DenyUnknownRoute",
    "GateMiddleware",
    "ROUTE_RULES",
    "RouteRule",
    "SIGNIN_PATH",
    "evaluate",
    "is_api_path",
    "match_route",
]
