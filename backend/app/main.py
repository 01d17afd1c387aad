import logging
from pathlib import Path

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from fastapi.staticfiles import StaticFiles

from app.api.main import api_router
from app.api.routes.pages import router as pages_router
from app.core.config import Settings, settings
from app.core.gate import API_PREFIX, GateMiddleware
from app.core.gate.evaluate import SessionVerifier

_logger = logging.getLogger(__name__)

APP_DIR = Path(__file__).resolve().parent


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}" if route.tags else route.name


def create_app(
    config: Settings | None = None,
    verify_session: SessionVerifier | None = None,
) -> FastAPI:
    """
    Build the application around one immutable Settings instance.

    verify_session overrides the session-token check used by the request gate (tests).
    """
    config = config or settings

    if config.PLAYWRIGHT_TEST:
        _logger.warning("PLAYWRIGHT_TEST is set: request gate is DISABLED")

    app = FastAPI(
        title=config.PROJECT_NAME,
        # Undeclared /api paths are denied by the gate, so no docs routes
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        generate_unique_id_function=custom_generate_unique_id,
    )
    app.state.settings = config
    app.state.s3_client = None

    # ---------------------------------------------------------------------------
    # Global exception handlers: standardized error response format
    # ---------------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Return 422 with a human-readable error string instead of raw Pydantic errors."""
        messages = []
        for err in exc.errors():
            loc = " → ".join(str(l) for l in err.get("loc", []) if l != "body")
            msg = err.get("msg", "Invalid value")
            messages.append(f"{loc}: {msg}" if loc else msg)
        return JSONResponse(status_code=422, content={"error": "; ".join(messages)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions. Log and return 500 with a safe message."""
        _logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        detail = "Internal server error"
        if config.ENVIRONMENT == "local":
            detail = f"Internal server error: {exc}"
        return JSONResponse(status_code=500, content={"error": detail})

    # Gate runs in front of everything, including static mounts
    app.add_middleware(GateMiddleware, settings=config, verify_session=verify_session)

    app.include_router(api_router, prefix=API_PREFIX)
    app.include_router(pages_router)

    app.mount("/static", StaticFiles(directory=APP_DIR / "static", check_dir=False), name="static")
    app.mount("/images", StaticFiles(directory=APP_DIR / "images", check_dir=False), name="images")

    return app


if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(dsn=str(settings.SENTRY_DSN), enable_tracing=True)

app = create_app()
