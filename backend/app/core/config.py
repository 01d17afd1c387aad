import secrets
from typing import Literal

from pydantic import HttpUrl, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process configuration, read once at startup from the environment (and .env).

    Frozen: the Gate and the identity provider receive this instance and never
    consult os.environ themselves.
    """

    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    PROJECT_NAME: str = "Nightscout Backup Admin"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    SECRET_KEY: str = secrets.token_urlsafe(32)
    # 60 seconds * 60 minutes * 24 hours * 30 days = 30 days
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 30

    # Disables the request gate entirely. Automated UI tests only.
    PLAYWRIGHT_TEST: bool = False

    DISCORD_CLIENT_ID: str = ""
    DISCORD_CLIENT_SECRET: str = ""
    ALLOWED_DISCORD_USER_ID: str = ""
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    OAUTH_HTTP_TIMEOUT_SECONDS: float = 10.0

    AWS_REGION: str | None = None
    BACKUP_S3_BUCKET: str | None = None
    BACKUP_S3_PREFIX: str | None = None
    BACKUP_DOWNLOAD_URL_TTL: int = 300

    PYTHON_BACKUP_API_URL: str | None = None
    BACKUP_API_TIMEOUT_SECONDS: float = 30.0

    PM2_BIN: str = "pm2"
    PM2_TIMEOUT_SECONDS: float = 10.0
    BOT_PROCESS_MATCH: str = "bot"

    SENTRY_DSN: HttpUrl | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def session_cookie_secure(self) -> bool:
        return self.ENVIRONMENT != "local"


settings = Settings()  # type: ignore
