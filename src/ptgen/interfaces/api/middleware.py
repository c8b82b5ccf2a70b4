"""Request gate middleware: CORS preflight plus the request validator."""

from __future__ import annotations

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ptgen.infrastructure.validation import RequestValidator

from .docs import documentation
from .responses import CORS_HEADERS, json_response

log = structlog.get_logger(__name__)


class RequestGateMiddleware(BaseHTTPMiddleware):
    """Answers OPTIONS preflights and rejects requests failing validation.

    Runs before routing, so unknown paths are validated too.

    Args:
        app: ASGI application.
        validator: Shared validator (owns the rate-limit windows).
        author: Name used in the copyright line of rejections.
    """

    def __init__(self, app: object, *, validator: RequestValidator, author: str) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._validator = validator
        self._author = author

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)

        raw_path = request.scope.get("raw_path") or b""
        path = raw_path.decode("latin-1") if raw_path else request.url.path
        result = self._validator.validate(
            request.method,
            path,
            request.url.query,
            request.headers,
        )
        if result.show_docs:
            return documentation(
                self._author,
                accept=request.headers.get("accept"),
                secured=True,
            )
        if not result.valid:
            return json_response(
                {"success": False, "error": result.error},
                author=self._author,
                status_code=result.status,
            )

        request.state.client_ip = result.client_ip
        return await call_next(request)
