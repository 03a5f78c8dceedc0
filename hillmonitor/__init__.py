"""Request routing and webhook verification for HillMonitor serverless handlers.

``serve_resource`` builds a CRUD proxy onto a Platform API collection and
``serve_webhook`` builds a signed webhook receiver. CORS defaults to the
comma-separated ``HILLMONITOR_ALLOWED_ORIGINS`` list.
"""
from hillmonitor.auth import AuthResult, AuthUser, verify_auth
from hillmonitor.cors import CorsHandler, create_cors_handler, get_default_cors_handler
from hillmonitor.db import create_authenticated_client, create_service_client
from hillmonitor.domain.signatures import verify_webhook_signature
from hillmonitor.models.platform import (
    AlertMatch,
    FullGazetteEditionResponse,
    FullMeetingResponse,
    GazetteAlertMatch,
    GovtRelease,
    GovtReleaseAlertMatch,
    MatchGroup,
    Meeting,
)
from hillmonitor.providers.platform.client import (
    PlatformResponse,
    get_full_meeting,
    get_gazette_edition,
    get_gazette_edition_alert_matches,
    get_govt_release,
    get_govt_release_alert_matches,
    is_platform_configured,
    platform_fetch,
    platform_request,
)
from hillmonitor.routers.resources import RequestContext, ResourceConfig, serve_resource
from hillmonitor.routers.webhooks import WebhookConfig, WebhookContext, serve_webhook

__all__ = [
    "AlertMatch",
    "AuthResult",
    "AuthUser",
    "CorsHandler",
    "FullGazetteEditionResponse",
    "FullMeetingResponse",
    "GazetteAlertMatch",
    "GovtRelease",
    "GovtReleaseAlertMatch",
    "MatchGroup",
    "Meeting",
    "PlatformResponse",
    "RequestContext",
    "ResourceConfig",
    "WebhookConfig",
    "WebhookContext",
    "create_authenticated_client",
    "create_cors_handler",
    "create_service_client",
    "get_default_cors_handler",
    "get_full_meeting",
    "get_gazette_edition",
    "get_gazette_edition_alert_matches",
    "get_govt_release",
    "get_govt_release_alert_matches",
    "is_platform_configured",
    "platform_fetch",
    "platform_request",
    "serve_resource",
    "serve_webhook",
    "verify_auth",
    "verify_webhook_signature",
]
