from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter

from hillmonitor.config import DEFAULT_PLATFORM_API_URL, settings
from hillmonitor.models.platform import (
    FullGazetteEditionResponse,
    FullMeetingResponse,
    GazetteAlertMatch,
    GovtRelease,
    GovtReleaseAlertMatch,
)
from hillmonitor.observability import log_event


USER_SCOPE_KEY = "external_user_id"
TIMEOUT_ERROR = "Request timeout"
_SCOPED_BODY_METHODS = {"POST", "PATCH", "PUT"}

_EP_MEETINGS = "/api/v1/meetings/"
_EP_GAZETTE_EDITIONS = "/api/v1/gazette/editions/"
_EP_GOVT_RELEASES = "/api/v1/govt-releases/"

T = TypeVar("T")


@dataclass
class PlatformResponse(Generic[T]):
    """Uniform result of a Platform API call. Timeouts are values, not exceptions."""

    data: T | None
    status: int
    error: str | None = None


def is_platform_configured() -> bool:
    return bool(settings.hillmonitor_secret_key)


def _build_base_url() -> str:
    return (settings.hillmonitor_api_url or DEFAULT_PLATFORM_API_URL).rstrip("/")


def _build_headers() -> dict[str, str]:
    return {
        "Authorization": f"Bearer {settings.hillmonitor_secret_key}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def _build_client(timeout_seconds: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout_seconds)


async def _send_request(
    *,
    method: str,
    url: str,
    headers: dict[str, str],
    timeout_seconds: float,
    params: dict[str, Any] | None = None,
    json_payload: dict[str, Any] | None = None,
) -> httpx.Response:
    # wait_for bounds the whole exchange; httpx timeouts only bound each phase.
    async with _build_client(timeout_seconds) as client:
        return await asyncio.wait_for(
            client.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=json_payload,
            ),
            timeout=timeout_seconds,
        )


def _parse_body(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return text


async def _execute(
    *,
    method: str,
    path: str,
    params: dict[str, Any] | None = None,
    json_payload: dict[str, Any] | None = None,
) -> httpx.Response | None:
    """Single attempt against the Platform API. Returns None when the time bound elapses."""
    timeout_seconds = settings.hillmonitor_request_timeout_seconds
    log_event("platform_request", method=method, path=path, params=sorted(params or {}))
    try:
        return await _send_request(
            method=method,
            url=f"{_build_base_url()}{path}",
            headers=_build_headers(),
            timeout_seconds=timeout_seconds,
            params=params or None,
            json_payload=json_payload,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException):
        log_event(
            "platform_request_timeout",
            level=logging.WARNING,
            method=method,
            path=path,
            timeout_seconds=timeout_seconds,
        )
        return None


async def platform_request(
    path: str,
    method: str,
    *,
    params: dict[str, Any] | None = None,
    body: dict[str, Any] | None = None,
    user_id: str | None = None,
    filter_by_user: bool | None = None,
) -> PlatformResponse[Any]:
    """
    User-scoped call to the Platform API.

    With filtering on, ``external_user_id`` goes into the query string for GET
    and into the JSON body for POST/PATCH/PUT. ``filter_by_user=None`` defers to
    HILLMONITOR_FILTER_BY_USER. Transport faults other than the timeout propagate.
    """
    method = method.upper()
    scoped = settings.hillmonitor_filter_by_user if filter_by_user is None else filter_by_user

    request_params = {key: value for key, value in (params or {}).items() if value is not None}
    if method == "GET" and scoped and user_id:
        request_params[USER_SCOPE_KEY] = user_id

    request_body: dict[str, Any] | None = None
    if method != "GET" and body is not None:
        request_body = dict(body)
        if method in _SCOPED_BODY_METHODS and scoped and user_id:
            request_body[USER_SCOPE_KEY] = user_id

    response = await _execute(
        method=method,
        path=path,
        params=request_params,
        json_payload=request_body,
    )
    if response is None:
        return PlatformResponse(data=None, status=504, error=TIMEOUT_ERROR)
    return PlatformResponse(data=_parse_body(response.text), status=response.status_code)


async def platform_fetch(path: str, params: dict[str, Any] | None = None) -> PlatformResponse[Any]:
    """Organization-wide GET. Never scoped to a user; non-2xx statuses become errors."""
    request_params = {key: value for key, value in (params or {}).items() if value is not None}
    response = await _execute(method="GET", path=path, params=request_params)
    if response is None:
        return PlatformResponse(data=None, status=504, error=TIMEOUT_ERROR)
    if not response.is_success:
        return PlatformResponse(data=None, status=response.status_code, error=f"HTTP {response.status_code}")
    return PlatformResponse(data=_parse_body(response.text), status=response.status_code)


def _unwrap_results(data: Any) -> Any:
    # Paginated list endpoints wrap rows in {"results": [...]}.
    if isinstance(data, dict) and "results" in data:
        return data["results"]
    return data


async def _fetch_model(path: str, model: type[BaseModel]) -> PlatformResponse[Any]:
    result = await platform_fetch(path)
    if result.data is None:
        return result
    return PlatformResponse(data=model.model_validate(result.data), status=result.status)


async def _fetch_model_list(path: str, model: type[BaseModel]) -> PlatformResponse[Any]:
    result = await platform_fetch(path)
    if result.data is None:
        return result
    rows = TypeAdapter(list[model]).validate_python(_unwrap_results(result.data))
    return PlatformResponse(data=rows, status=result.status)


async def get_full_meeting(meeting_id: int) -> PlatformResponse[FullMeetingResponse]:
    return await _fetch_model(f"{_EP_MEETINGS}{meeting_id}/full/", FullMeetingResponse)


async def get_gazette_edition(edition_id: int) -> PlatformResponse[FullGazetteEditionResponse]:
    return await _fetch_model(f"{_EP_GAZETTE_EDITIONS}{edition_id}/", FullGazetteEditionResponse)


async def get_gazette_edition_alert_matches(edition_id: int) -> PlatformResponse[list[GazetteAlertMatch]]:
    return await _fetch_model_list(f"{_EP_GAZETTE_EDITIONS}{edition_id}/alert-matches/", GazetteAlertMatch)


async def get_govt_release(release_id: int) -> PlatformResponse[GovtRelease]:
    return await _fetch_model(f"{_EP_GOVT_RELEASES}{release_id}/", GovtRelease)


async def get_govt_release_alert_matches(release_id: int) -> PlatformResponse[list[GovtReleaseAlertMatch]]:
    return await _fetch_model_list(f"{_EP_GOVT_RELEASES}{release_id}/alert-matches/", GovtReleaseAlertMatch)


PLATFORM_IMPLEMENTED_ENDPOINT_REGISTRY: dict[str, list[dict[str, str]]] = {
    "get_full_meeting": [{"method": "GET", "path": "/api/v1/meetings/{meeting_id}/full/"}],
    "get_gazette_edition": [{"method": "GET", "path": "/api/v1/gazette/editions/{edition_id}/"}],
    "get_gazette_edition_alert_matches": [
        {"method": "GET", "path": "/api/v1/gazette/editions/{edition_id}/alert-matches/"}
    ],
    "get_govt_release": [{"method": "GET", "path": "/api/v1/govt-releases/{release_id}/"}],
    "get_govt_release_alert_matches": [
        {"method": "GET", "path": "/api/v1/govt-releases/{release_id}/alert-matches/"}
    ],
}
