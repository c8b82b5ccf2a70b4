"""JSON envelope shared by every API response."""

from __future__ import annotations

import time
from typing import Any

from fastapi.responses import JSONResponse

VERSION = "1.0.6"

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Credentials": "false",
}

NOT_FOUND_ERROR = "API endpoint not found. Please check the documentation for valid endpoints."


def copyright_line(author: str) -> str:
    return f"Powered by @{author}"


def envelope(payload: dict[str, Any] | None, *, author: str) -> dict[str, Any]:
    """Defaults first, then *payload* on top (payload keys win)."""
    body: dict[str, Any] = {
        "success": False,
        "error": None,
        "format": "",
        "version": VERSION,
        "copyright": copyright_line(author),
        "generate_at": int(time.time() * 1000),
    }
    body.update(payload or {})
    return body


def json_response(
    payload: dict[str, Any] | None,
    *,
    author: str,
    status_code: int = 200,
) -> JSONResponse:
    return JSONResponse(
        envelope(payload, author=author),
        status_code=status_code,
        headers={"Access-Control-Allow-Origin": "*"},
    )


def not_found(author: str) -> JSONResponse:
    return json_response({"success": False, "error": NOT_FOUND_ERROR}, author=author, status_code=404)
