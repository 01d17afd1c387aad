"""
Gate decisions. Every deny renders exactly one terminal response.
"""

from dataclasses import dataclass
from urllib.parse import urlencode

from starlette.responses import JSONResponse, RedirectResponse, Response

from app.core.gate.routes import SIGNIN_PATH


@dataclass(frozen=True)
class Allow:
    subject: str | None = None


@dataclass(frozen=True)
class DenyUnauthorized:
    api: bool
    callback_url: str

    def to_response(self) -> Response:
        if self.api:
            return JSONResponse(status_code=401, content={"error": "Unauthorized"})
        query = urlencode({"callbackUrl": self.callback_url}, safe="/")
        return RedirectResponse(url=f"{SIGNIN_PATH}?{query}", status_code=307)


@dataclass(frozen=True)
class DenyMethodNotAllowed:
    method: str
    allowed: str

    @property
    def message(self) -> str:
        return (
            f"Method Not Allowed: {self.method} is not supported on this endpoint. "
            f"Use {self.allowed}."
        )

    def to_response(self) -> Response:
        return JSONResponse(
            status_code=405,
            content={"error": self.message},
            headers={"Allow": self.allowed},
        )


@dataclass(frozen=True)
class DenyUnknownRoute:
    path: str

    def to_response(self) -> Response:
        return JSONResponse(status_code=404, content={"error": "Not Found"})


Deny = DenyUnauthorized | DenyMethodNotAllowed | DenyUnknownRoute
Decision = Allow | Deny
