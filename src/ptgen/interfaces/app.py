"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from ptgen.infrastructure.common.rate_limiter import ClientRateLimiter
from ptgen.infrastructure.config import AppConfig
from ptgen.infrastructure.validation import RequestValidator
from ptgen.interfaces.api.middleware import RequestGateMiddleware
from ptgen.interfaces.api.responses import VERSION, json_response, not_found
from ptgen.interfaces.app_state import AppState
from ptgen.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration ONLY, NO resource initialization.

    Resources (HTTP client, cache, providers) are created in lifespan().
    """
    app = FastAPI(
        title="PT-Gen",
        description="Media metadata aggregation service",
        version=VERSION,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )

    app.state = AppState()
    app.state.config = config

    validator = RequestValidator(
        api_key=config.api_key,
        rate_limiter=ClientRateLimiter(
            max_requests=config.rate_limit.max_requests,
            window_seconds=config.rate_limit.window_seconds,
            sweep_interval=config.rate_limit.sweep_interval_seconds,
        ),
    )
    app.add_middleware(RequestGateMiddleware, validator=validator, author=config.author)

    from ptgen.interfaces.api.router import router

    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception(request: Request, exc: StarletteHTTPException) -> Response:
        # Unknown paths and unsupported methods share the 404 envelope
        if exc.status_code in (404, 405):
            return not_found(config.author)
        return json_response(
            {"success": False, "error": str(exc.detail)},
            author=config.author,
            status_code=exc.status_code,
        )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
