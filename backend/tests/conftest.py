from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.security import create_session_token
from app.main import create_app
from tests.utils.settings import make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def s3() -> MagicMock:
    return MagicMock()


@pytest.fixture
def app(settings: Settings, s3: MagicMock) -> FastAPI:
    application = create_app(settings)
    application.state.s3_client = s3
    return application


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(settings: Settings) -> dict[str, str]:
    """Bearer session token for the allowed identity."""
    token = create_session_token(settings.ALLOWED_DISCORD_USER_ID, settings)
    return {"Authorization": f"Bearer {token}"}
