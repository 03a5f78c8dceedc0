from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from fastapi import Response

from hillmonitor.config import settings


ALLOWED_METHODS = "GET, POST, PATCH, PUT, DELETE, OPTIONS"
ALLOWED_HEADERS = "authorization, x-client-info, apikey, content-type"


class CorsHandler:
    """Computes CORS headers for a fixed list of allowed origins."""

    def __init__(self, allowed_origins: Iterable[str]):
        self.allowed_origins: tuple[str, ...] = tuple(allowed_origins)
        if not self.allowed_origins:
            raise ValueError("At least one allowed origin is required")

    def is_allowed(self, origin: str | None) -> bool:
        return bool(origin) and origin in self.allowed_origins

    def get_cors_headers(self, origin: str | None) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": origin if self.is_allowed(origin) else self.allowed_origins[0],
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
        }

    def handle_cors_preflight(self, origin: str | None = None) -> Response:
        return Response(content="ok", status_code=200, headers=self.get_cors_headers(origin))


def parse_allowed_origins(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_cors_handler(allowed_origins: Iterable[str]) -> CorsHandler:
    return CorsHandler(allowed_origins)


@lru_cache(maxsize=1)
def get_default_cors_handler() -> CorsHandler | None:
    """Handler built from ``HILLMONITOR_ALLOWED_ORIGINS``, computed once per process."""
    origins = parse_allowed_origins(settings.hillmonitor_allowed_origins)
    if not origins:
        return None
    return CorsHandler(origins)
