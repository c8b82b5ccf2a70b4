from __future__ import annotations

import json
from typing import Any, cast

import structlog
from fastapi import APIRouter, Request, Response

from ptgen.application.use_cases import QueryParams
from ptgen.interfaces.app_state import AppState

from .docs import documentation
from .responses import json_response

log = structlog.get_logger(__name__)

router = APIRouter(tags=["ptgen"])


async def _json_body(request: Request) -> dict[str, Any]:
    """JSON object body, or {} when absent, not JSON, or not an object."""
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type:
        return {}
    raw = (await request.body()).decode("utf-8", errors="replace")
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        log.warning("request_body_invalid_json", size_bytes=len(raw))
        return {}
    return body if isinstance(body, dict) else {}


@router.get("/")
@router.get("/api")
async def docs_page(request: Request) -> Response:
    state = cast(AppState, request.app.state)
    return documentation(
        state.config.author,
        accept=request.headers.get("accept"),
        secured=bool(state.config.api_key),
    )


@router.post("/")
@router.post("/api")
async def query(request: Request) -> Response:
    state = cast(AppState, request.app.state)
    params = QueryParams.merge(dict(request.query_params), await _json_body(request))
    log.info(
        "query_request",
        url=params.url,
        source=params.source,
        query=params.query,
        sid=params.sid or params.tmdb_id,
    )
    result = await state.query_router.handle(params)
    return json_response(result.payload, author=state.config.author, status_code=result.status)
