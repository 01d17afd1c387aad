"""Server-rendered pages: dashboard, sign-in, robots.txt."""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

from app.api.deps import SettingsDep, SubjectDep
from app.core.gate import SIGNIN_PATH
from app.core.identity import safe_callback_url

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["pages"], include_in_schema=False)

_SIGNIN_ERRORS = {
    "AccessDenied": "Access denied. Only the configured owner account may sign in.",
    "OAuthCallback": "Sign-in failed. Please try again.",
}


@router.get("/", response_class=HTMLResponse)
async def dashboard(
    request: Request, settings: SettingsDep, subject: SubjectDep
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"project_name": settings.PROJECT_NAME, "subject": subject},
    )


@router.get(SIGNIN_PATH, response_class=HTMLResponse)
async def signin_page(
    request: Request,
    settings: SettingsDep,
    callbackUrl: str | None = None,
    error: str | None = None,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "signin.html",
        {
            "project_name": settings.PROJECT_NAME,
            "callback_url": safe_callback_url(callbackUrl),
            "error_message": _SIGNIN_ERRORS.get(error) if error else None,
        },
    )


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots() -> str:
    return "User-agent: *\nDisallow: /\n"
