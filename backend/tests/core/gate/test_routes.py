"""Unit tests for the gate route table: match_route, is_api_path."""

import pytest

from app.core.gate import ROUTE_RULES, is_api_path, match_route


@pytest.mark.parametrize(
    "path,name,method,requires_auth",
    [
        ("/api/backups/create", "create-backup", "POST", True),
        ("/api/backups/delete", "delete-backup", "DELETE", True),
        ("/api/backups/download", "download-backup", "GET", True),
        ("/api/backups/list", "list-backups", "GET", True),
        ("/api/pm2/status", "process-status", "GET", True),
        ("/api/auth", "identity-provider", None, False),
        ("/api/auth/callback/discord", "identity-provider", None, False),
        ("/api/utils/health-check", "health-check", "GET", False),
        ("/auth/signin", "signin-page", None, False),
        ("/static/css/site.css", "static", None, False),
        ("/images/logo.png", "images", None, False),
        ("/favicon.ico", "favicon", None, False),
        ("/robots.txt", "robots", None, False),
    ],
)
def test_match_route_declared(
    path: str, name: str, method: str | None, requires_auth: bool
) -> None:
    rule = match_route(path)
    assert rule.name == name
    assert rule.method == method
    assert rule.requires_auth is requires_auth
    assert rule.declared is True


def test_match_route_unknown_api_default() -> None:
    rule = match_route("/api/backups/create/extra")
    assert rule.name == "unknown-api"
    assert rule.requires_auth is True
    assert rule.declared is False


def test_match_route_page_default() -> None:
    for path in ("/", "/dashboard", "/auth/signin/other", "/imagesx/a.png", "/robots.txt.bak"):
        rule = match_route(path)
        assert rule.name == "page", path
        assert rule.requires_auth is True
        assert rule.method is None


def test_is_api_path() -> None:
    assert is_api_path("/api") is True
    assert is_api_path("/api/backups/list") is True
    assert is_api_path("/apidocs") is False
    assert is_api_path("/") is False


def test_rule_names_unique_and_table_immutable() -> None:
    names = [r.name for r in ROUTE_RULES]
    assert len(names) == len(set(names))
    assert isinstance(ROUTE_RULES, tuple)
