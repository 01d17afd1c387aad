from typing import Any

from starlette.requests import Request

from app.core.config import Settings

ALLOWED_ID = "123456789012345678"
TEST_SECRET_KEY = "test-secret-key-for-session-tokens-0123456789"


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests: explicit values only, no .env file."""
    values: dict[str, Any] = {
        "_env_file": None,
        "ENVIRONMENT": "local",
        "SECRET_KEY": TEST_SECRET_KEY,
        "PLAYWRIGHT_TEST": False,
        "DISCORD_CLIENT_ID": "discord-client-id",
        "DISCORD_CLIENT_SECRET": "discord-client-secret",
        "ALLOWED_DISCORD_USER_ID": ALLOWED_ID,
        "PUBLIC_BASE_URL": "http://testserver",
        "AWS_REGION": "us-east-1",
        "BACKUP_S3_BUCKET": "test-bucket",
        "BACKUP_S3_PREFIX": "backups/",
        "PYTHON_BACKUP_API_URL": "http://localhost:8000",
        "SENTRY_DSN": None,
    }
    values.update(overrides)
    return Settings(**values)


def make_request(
    *,
    method: str = "GET",
    path: str = "/",
    query_string: bytes = b"",
    headers: list[tuple[bytes, bytes]] | None = None,
) -> Request:
    scope: dict = {
        "type": "http",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "query_string": query_string,
        "headers": headers or [],
        "server": ("localhost", 80),
        "client": ("127.0.0.1", 0),
        "scheme": "http",
        "root_path": "",
    }
    return Request(scope)
