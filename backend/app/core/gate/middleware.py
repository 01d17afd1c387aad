from functools import partial

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from app.core.config import Settings
from app.core.gate.decision import Allow
from app.core.gate.evaluate import SessionVerifier, evaluate
from app.core.security import verify_session as verify_session_token


class GateMiddleware(BaseHTTPMiddleware):
    """Run the request gate in front of every route; handlers see only allowed requests."""

    def __init__(
        self,
        app: ASGIApp,
        settings: Settings,
        verify_session: SessionVerifier | None = None,
    ) -> None:
        super().__init__(app)
        self.settings = settings
        self.verify_session = verify_session or partial(
            verify_session_token, settings=settings
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        decision = evaluate(
            request, settings=self.settings, verify_session=self.verify_session
        )
        if not isinstance(decision, Allow):
            return decision.to_response()
        request.state.subject = decision.subject
        return await call_next(request)
