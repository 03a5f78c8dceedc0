"""RESTful resource router.

Maps ``(HTTP method, resource id present)`` onto one of five operations and
proxies each to the Platform API with per-user scoping:

    GET    /<collection>/        list
    GET    /<collection>/<id>    get
    POST   /<collection>/        create
    PATCH  /<collection>/<id>    update   (PUT as well)
    DELETE /<collection>/<id>    delete

Any other combination, and any operation that is not enabled, answers 405.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable

from fastapi import FastAPI, Request, Response
from starlette.datastructures import QueryParams

from hillmonitor.auth import AuthResult, verify_auth
from hillmonitor.cors import CorsHandler, get_default_cors_handler
from hillmonitor.domain.errors import AuthenticationError, ConfigurationError, InvalidRequestError
from hillmonitor.main import build_app
from hillmonitor.observability import log_event, request_id_of
from hillmonitor.providers.platform.client import is_platform_configured, platform_request
from hillmonitor.responses import (
    bad_request_response,
    json_response,
    method_not_allowed_response,
    no_content_response,
    server_error_response,
    unauthorized_response,
)


OPERATIONS: tuple[str, ...] = ("list", "get", "create", "update", "delete")
READ_OPERATIONS: tuple[str, ...] = ("list", "get")
_BODY_METHODS = {"POST", "PATCH", "PUT"}


@dataclass
class RequestContext:
    """Per-request state handed to operation handlers."""
    request: Request
    cors_headers: dict[str, str]
    user_id: str
    resource_id: str | None
    body: dict[str, Any] | None
    params: QueryParams


HandlerFn = Callable[[RequestContext], Awaitable[Response]]
AuthVerifier = Callable[[Request], Awaitable[AuthResult]]


@dataclass
class ResourceConfig:
    platform_path: str
    cors: CorsHandler | None = None
    # "all", "read", or an explicit list of operation names
    operations: str | Iterable[str] = "all"
    handlers: dict[str, HandlerFn] = field(default_factory=dict)
    verify: AuthVerifier = verify_auth
    filter_by_user: bool | None = None


def resolve_enabled_operations(operations: str | Iterable[str]) -> frozenset[str]:
    if operations == "all":
        return frozenset(OPERATIONS)
    if operations == "read":
        return frozenset(READ_OPERATIONS)
    if isinstance(operations, str):
        raise ValueError(f"Unknown operations preset: {operations!r}")

    enabled = frozenset(operations)
    unknown = enabled - set(OPERATIONS)
    if unknown:
        raise ValueError(f"Unknown operations: {', '.join(sorted(unknown))}")
    return enabled


def extract_resource_id(path: str) -> str | None:
    """Last path segment when the path has at least two non-empty segments.

    ``.`` and ``..`` are resolved first, so they never reach the Platform URL
    as an identifier.
    """
    parts: list[str] = []
    for part in path.split("/"):
        if not part or part == ".":
            continue
        if part == "..":
            if parts:
                parts.pop()
            continue
        parts.append(part)
    if len(parts) >= 2:
        return parts[-1]
    return None


def route_operation(method: str, resource_id: str | None) -> str | None:
    method = method.upper()
    if method == "GET":
        return "get" if resource_id else "list"
    if method == "POST":
        return None if resource_id else "create"
    if method in {"PATCH", "PUT"}:
        return "update" if resource_id else None
    if method == "DELETE":
        return "delete" if resource_id else None
    return None


def _require_body(ctx: RequestContext) -> dict[str, Any]:
    if ctx.body is None:
        raise InvalidRequestError("Request body is required")
    return ctx.body


def create_default_handlers(platform_path: str, filter_by_user: bool | None = None) -> dict[str, HandlerFn]:
    def _item_path(ctx: RequestContext) -> str:
        return f"{platform_path}{ctx.resource_id}/"

    async def list_resources(ctx: RequestContext) -> Response:
        result = await platform_request(
            platform_path,
            "GET",
            params=dict(ctx.params),
            user_id=ctx.user_id,
            filter_by_user=filter_by_user,
        )
        return json_response(result.data, result.status, ctx.cors_headers)

    async def get_resource(ctx: RequestContext) -> Response:
        result = await platform_request(
            _item_path(ctx),
            "GET",
            user_id=ctx.user_id,
            filter_by_user=filter_by_user,
        )
        return json_response(result.data, result.status, ctx.cors_headers)

    async def create_resource(ctx: RequestContext) -> Response:
        body = _require_body(ctx)
        result = await platform_request(
            platform_path,
            "POST",
            body=body,
            user_id=ctx.user_id,
            filter_by_user=filter_by_user,
        )
        return json_response(result.data, result.status, ctx.cors_headers)

    async def update_resource(ctx: RequestContext) -> Response:
        body = _require_body(ctx)
        result = await platform_request(
            _item_path(ctx),
            "PATCH",
            body=body,
            user_id=ctx.user_id,
            filter_by_user=filter_by_user,
        )
        return json_response(result.data, result.status, ctx.cors_headers)

    async def delete_resource(ctx: RequestContext) -> Response:
        result = await platform_request(
            _item_path(ctx),
            "DELETE",
            user_id=ctx.user_id,
            filter_by_user=filter_by_user,
        )
        if result.status == 204:
            return no_content_response(ctx.cors_headers)
        return json_response(None, result.status, ctx.cors_headers)

    return {
        "list": list_resources,
        "get": get_resource,
        "create": create_resource,
        "update": update_resource,
        "delete": delete_resource,
    }


def build_handler_table(
    defaults: dict[str, HandlerFn],
    overrides: dict[str, HandlerFn] | None,
    enabled: Iterable[str],
) -> dict[str, HandlerFn]:
    """Defaults, then overrides, then the enabled mask. Disabled operations are absent."""
    overrides = overrides or {}
    unknown = set(overrides) - set(OPERATIONS)
    if unknown:
        raise ValueError(f"Unknown handler overrides: {', '.join(sorted(unknown))}")

    enabled_set = set(enabled)
    table: dict[str, HandlerFn] = {}
    for operation in OPERATIONS:
        if operation not in enabled_set:
            continue
        handler = overrides.get(operation) or defaults.get(operation)
        if handler is not None:
            table[operation] = handler
    return table


async def _parse_json_body(request: Request) -> dict[str, Any] | None:
    # Unparseable or non-object bodies count as absent; operations needing one answer 400.
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def create_resource_handler(config: ResourceConfig) -> Callable[[Request], Awaitable[Response]]:
    cors = config.cors if config.cors is not None else get_default_cors_handler()
    if cors is None:
        raise ConfigurationError("No CORS handler given and HILLMONITOR_ALLOWED_ORIGINS is not set")

    handlers = build_handler_table(
        create_default_handlers(config.platform_path, config.filter_by_user),
        config.handlers,
        resolve_enabled_operations(config.operations),
    )
    verify = config.verify

    async def handle(request: Request) -> Response:
        origin = request.headers.get("Origin")
        cors_headers = cors.get_cors_headers(origin)
        req_id = request_id_of(request)
        method = request.method.upper()

        if method == "OPTIONS":
            return cors.handle_cors_preflight(origin)

        try:
            if not is_platform_configured():
                raise ConfigurationError("HILLMONITOR_SECRET_KEY is not set")

            auth = await verify(request)
            if auth.error or auth.user is None:
                raise AuthenticationError(auth.error or "No authenticated user")

            resource_id = extract_resource_id(request.url.path)
            body = await _parse_json_body(request) if method in _BODY_METHODS else None
            ctx = RequestContext(
                request=request,
                cors_headers=cors_headers,
                user_id=auth.user.id,
                resource_id=resource_id,
                body=body,
                params=request.query_params,
            )

            operation = route_operation(method, resource_id)
            handler = handlers.get(operation) if operation else None
            if handler is None:
                return method_not_allowed_response(cors_headers)
            return await handler(ctx)
        except ConfigurationError as exc:
            log_event("resource_configuration_error", level=logging.ERROR, request_id=req_id, detail=str(exc))
            return server_error_response(cors_headers)
        except AuthenticationError:
            return unauthorized_response(cors_headers)
        except InvalidRequestError as exc:
            return bad_request_response(exc.message, cors_headers)
        except Exception as exc:
            log_event(
                "resource_handler_failed",
                level=logging.ERROR,
                request_id=req_id,
                method=method,
                path=request.url.path,
                error=repr(exc),
            )
            return server_error_response(cors_headers, exc)

    return handle


def serve_resource(config: ResourceConfig) -> FastAPI:
    return build_app(f"HillMonitor resource {config.platform_path}", create_resource_handler(config))
