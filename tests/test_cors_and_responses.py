import json

import pytest

from hillmonitor import cors
from hillmonitor.config import settings
from hillmonitor.responses import (
    error_response,
    method_not_allowed_response,
    no_content_response,
    not_found_response,
    server_error_response,
    timeout_response,
)


def test_allowed_origin_is_echoed_and_others_get_the_first_origin():
    handler = cors.create_cors_handler(["http://localhost:3000", "https://app.example.com"])

    allowed = handler.get_cors_headers("https://app.example.com")
    other = handler.get_cors_headers("https://evil.example")
    missing = handler.get_cors_headers(None)

    assert allowed["Access-Control-Allow-Origin"] == "https://app.example.com"
    assert other["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert missing["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert allowed["Access-Control-Allow-Methods"] == "GET, POST, PATCH, PUT, DELETE, OPTIONS"
    assert allowed["Access-Control-Allow-Headers"] == "authorization, x-client-info, apikey, content-type"


def test_preflight_response():
    handler = cors.create_cors_handler(["http://localhost:3000"])
    response = handler.handle_cors_preflight("http://localhost:3000")
    assert response.status_code == 200
    assert response.body == b"ok"
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_empty_origin_list_is_rejected():
    with pytest.raises(ValueError):
        cors.create_cors_handler([])


def test_parse_allowed_origins():
    assert cors.parse_allowed_origins(None) == []
    assert cors.parse_allowed_origins("") == []
    assert cors.parse_allowed_origins(" http://a.example , ,https://b.example ") == [
        "http://a.example",
        "https://b.example",
    ]


def test_default_handler_is_computed_once(monkeypatch):
    cors.get_default_cors_handler.cache_clear()
    monkeypatch.setattr(settings, "hillmonitor_allowed_origins", "http://a.example,http://b.example")
    try:
        first = cors.get_default_cors_handler()
        monkeypatch.setattr(settings, "hillmonitor_allowed_origins", "http://c.example")
        second = cors.get_default_cors_handler()
        assert first is second
        assert first.allowed_origins == ("http://a.example", "http://b.example")
    finally:
        cors.get_default_cors_handler.cache_clear()


def test_default_handler_absent_without_configuration(monkeypatch):
    cors.get_default_cors_handler.cache_clear()
    monkeypatch.setattr(settings, "hillmonitor_allowed_origins", None)
    try:
        assert cors.get_default_cors_handler() is None
    finally:
        cors.get_default_cors_handler.cache_clear()


def test_error_responses_are_terse_outside_development(monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    headers = {"Access-Control-Allow-Origin": "http://localhost:3000"}

    detailed = error_response("Bad thing", 422, headers, details="stack trace")
    server_error = server_error_response(headers, RuntimeError("secret detail"))

    assert json.loads(detailed.body) == {"error": "Bad thing"}
    assert json.loads(server_error.body) == {"error": "Internal server error"}
    assert server_error.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert json.loads(not_found_response(headers).body) == {"error": "Not found"}
    assert json.loads(method_not_allowed_response(headers).body) == {"error": "Method not allowed"}
    assert timeout_response(headers).status_code == 504


def test_error_details_in_development(monkeypatch):
    monkeypatch.setattr(settings, "environment", "development")
    detailed = error_response("Bad thing", 422, {}, details="stack trace")
    assert json.loads(detailed.body) == {"error": "Bad thing", "details": "stack trace"}


def test_no_content_response_has_empty_body():
    response = no_content_response({"Access-Control-Allow-Origin": "*"})
    assert response.status_code == 204
    assert response.body == b""
