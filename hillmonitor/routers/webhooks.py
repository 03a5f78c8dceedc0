from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request, Response

from hillmonitor.config import settings
from hillmonitor.cors import CorsHandler, get_default_cors_handler
from hillmonitor.domain.errors import ConfigurationError, InvalidRequestError, SignatureError
from hillmonitor.domain.signatures import SIGNATURE_HEADER, verify_webhook_signature
from hillmonitor.main import build_app
from hillmonitor.models.webhooks import (
    GazetteProcessedData,
    GazetteProcessedEvent,
    GovtReleaseProcessedData,
    GovtReleaseProcessedEvent,
    MeetingProcessedEvent,
    WebhookPayload,
    parse_webhook_payload,
)
from hillmonitor.observability import log_event, request_id_of
from hillmonitor.responses import (
    bad_request_response,
    method_not_allowed_response,
    server_error_response,
    success_response,
    unauthorized_response,
)


@dataclass
class WebhookContext:
    request: Request
    cors_headers: dict[str, str]
    payload: WebhookPayload


MeetingCallback = Callable[[int, WebhookContext], Awaitable[None]]
GazetteCallback = Callable[[GazetteProcessedData, WebhookContext], Awaitable[None]]
GovtReleaseCallback = Callable[[GovtReleaseProcessedData, WebhookContext], Awaitable[None]]


@dataclass
class WebhookConfig:
    # Defaults to the handler built from HILLMONITOR_ALLOWED_ORIGINS, if any.
    cors: CorsHandler | None = None
    # Defaults to HILLMONITOR_WEBHOOK_SECRET, read per request.
    secret: str | None = None
    on_meeting_processed: MeetingCallback | None = None
    on_gazette_processed: GazetteCallback | None = None
    on_govt_release_processed: GovtReleaseCallback | None = None


async def dispatch_webhook_event(config: WebhookConfig, payload: WebhookPayload, ctx: WebhookContext) -> bool:
    """Run the callback registered for ``payload.event``. Returns False when nothing ran."""
    callback: Callable[[Any, WebhookContext], Awaitable[None]] | None
    if isinstance(payload, MeetingProcessedEvent):
        callback, argument = config.on_meeting_processed, payload.data.meeting_id
    elif isinstance(payload, GazetteProcessedEvent):
        callback, argument = config.on_gazette_processed, payload.data
    elif isinstance(payload, GovtReleaseProcessedEvent):
        callback, argument = config.on_govt_release_processed, payload.data
    else:
        callback, argument = None, None

    if callback is None:
        log_event(
            "webhook_event_unhandled",
            level=logging.WARNING,
            request_id=request_id_of(ctx.request),
            event_type=payload.event,
        )
        return False

    await callback(argument, ctx)
    return True


def create_webhook_handler(config: WebhookConfig) -> Callable[[Request], Awaitable[Response]]:
    cors = config.cors if config.cors is not None else get_default_cors_handler()

    async def handle(request: Request) -> Response:
        origin = request.headers.get("Origin")
        cors_headers = cors.get_cors_headers(origin) if cors else {}
        req_id = request_id_of(request)
        method = request.method.upper()

        if method == "OPTIONS" and cors:
            return cors.handle_cors_preflight(origin)
        if method != "POST":
            return method_not_allowed_response(cors_headers)

        try:
            secret = config.secret or settings.hillmonitor_webhook_secret
            if not secret:
                raise ConfigurationError("HILLMONITOR_WEBHOOK_SECRET is not set")

            raw_body = await request.body()
            verify_webhook_signature(raw_body, request.headers.get(SIGNATURE_HEADER), secret)
            payload = parse_webhook_payload(raw_body)

            ctx = WebhookContext(request=request, cors_headers=cors_headers, payload=payload)
            handled = await dispatch_webhook_event(config, payload, ctx)
            log_event("webhook_processed", request_id=req_id, event_type=payload.event, handled=handled)
            return success_response({"received": True}, cors_headers)
        except ConfigurationError as exc:
            log_event("webhook_configuration_error", level=logging.ERROR, request_id=req_id, detail=str(exc))
            return server_error_response(cors_headers)
        except SignatureError as exc:
            log_event(
                "webhook_signature_rejected",
                level=logging.WARNING,
                request_id=req_id,
                reason=type(exc).__name__,
            )
            return unauthorized_response(cors_headers)
        except InvalidRequestError as exc:
            return bad_request_response(exc.message, cors_headers)
        except Exception as exc:
            log_event("webhook_failed", level=logging.ERROR, request_id=req_id, error=repr(exc))
            return server_error_response(cors_headers, exc)

    return handle


def serve_webhook(config: WebhookConfig) -> FastAPI:
    return build_app("HillMonitor webhook", create_webhook_handler(config))
