"""Tests for normalized error responses."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from placesapi.core.errors import (
    AppError,
    ConfigurationError,
    UpstreamUnavailableError,
    app_error_handler,
    unhandled_exception_handler,
)
from placesapi.core.middleware.request_id import RequestIdMiddleware


def test_not_found_has_standard_shape(client):
    resp = client.get("/api/countries/missing.json")
    assert resp.status_code == 404
    body = resp.json()
    rid = resp.headers.get("x-request-id")
    assert body["error"]["code"] == "not_found"
    assert body["error"]["request_id"] == rid
    assert body["detail"] == "File not found."


def test_request_id_echoed(client):
    resp = client.get("/api/countries/missing.json", headers={"X-Request-Id": "rid-42"})
    assert resp.headers["x-request-id"] == "rid-42"
    assert resp.json()["error"]["request_id"] == "rid-42"


def test_body_validation_is_400(client, auth_headers):
    resp = client.post(
        "/api/countries/x.json/cities",
        content="not json",
        headers={**auth_headers({"id": "u", "email": "e@x", "plan": "basic"}), "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_unknown_route_is_404(client):
    resp = client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"


def _app_raising(exc):
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/boom")
    def boom():
        raise exc

    return TestClient(app, raise_server_exceptions=False)


def test_configuration_error_is_redacted():
    resp = _app_raising(ConfigurationError("GROQ_API_KEY not configured")).get("/boom")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Service is not configured"
    assert "GROQ" not in resp.text


def test_upstream_error_is_503():
    resp = _app_raising(UpstreamUnavailableError("AI provider timed out")).get("/boom")
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "upstream_unavailable"


def test_unexpected_error_is_generic_500():
    resp = _app_raising(RuntimeError("secret path /etc/x")).get("/boom")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Unexpected error"
    assert "/etc/x" not in resp.text
