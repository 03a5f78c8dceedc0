"""JSON response helpers shared by the resource and webhook routers.

Every helper takes the CORS headers computed for the current request so that
error responses remain readable by browsers.
"""
from __future__ import annotations

from typing import Any

from fastapi import Response
from fastapi.responses import JSONResponse

from hillmonitor.config import is_development


def json_response(data: Any, status: int, cors_headers: dict[str, str]) -> JSONResponse:
    return JSONResponse(content=data, status_code=status, headers=dict(cors_headers))


def success_response(data: Any, cors_headers: dict[str, str]) -> JSONResponse:
    return json_response(data, 200, cors_headers)


def created_response(data: Any, cors_headers: dict[str, str]) -> JSONResponse:
    return json_response(data, 201, cors_headers)


def no_content_response(cors_headers: dict[str, str]) -> Response:
    return Response(status_code=204, headers=dict(cors_headers))


def error_response(
    message: str,
    status: int,
    cors_headers: dict[str, str],
    details: str | None = None,
) -> JSONResponse:
    """Error body ``{"error": message}``; ``details`` is only exposed in development."""
    body: dict[str, Any] = {"error": message}
    if details and is_development():
        body["details"] = details
    return json_response(body, status, cors_headers)


def bad_request_response(message: str, cors_headers: dict[str, str]) -> JSONResponse:
    return error_response(message, 400, cors_headers)


def unauthorized_response(cors_headers: dict[str, str]) -> JSONResponse:
    return error_response("Unauthorized", 401, cors_headers)


def not_found_response(cors_headers: dict[str, str]) -> JSONResponse:
    return error_response("Not found", 404, cors_headers)


def method_not_allowed_response(cors_headers: dict[str, str]) -> JSONResponse:
    return error_response("Method not allowed", 405, cors_headers)


def server_error_response(cors_headers: dict[str, str], exc: BaseException | None = None) -> JSONResponse:
    """500 response. Outside development the caller only sees a generic message."""
    if exc is not None and is_development():
        return error_response(str(exc) or type(exc).__name__, 500, cors_headers, details=repr(exc))
    return error_response("Internal server error", 500, cors_headers)


def timeout_response(cors_headers: dict[str, str]) -> JSONResponse:
    return error_response("Request timeout", 504, cors_headers)
