from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from app.core.config import Settings
from app.core.storage import create_s3_client


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_s3_client(request: Request) -> Any:
    """Shared boto3 client, created on first use (boto3 clients are thread-safe)."""
    client = getattr(request.app.state, "s3_client", None)
    if client is None:
        client = create_s3_client(request.app.state.settings)
        request.app.state.s3_client = client
    return client


def get_current_subject(request: Request) -> str | None:
    """Subject verified by the gate (None for exempt routes or test-mode bypass)."""
    return getattr(request.state, "subject", None)


SettingsDep = Annotated[Settings, Depends(get_settings)]
S3ClientDep = Annotated[Any, Depends(get_s3_client)]
SubjectDep = Annotated[str | None, Depends(get_current_subject)]


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """Standard error body { error: str } for all JSON endpoints."""
    return JSONResponse(status_code=status_code, content={"error": message, **extra})
