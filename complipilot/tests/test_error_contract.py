"""Tests for normalized error responses."""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from complipilot.core.config import settings
from complipilot.core.errors import (
    AppError,
    UpstreamError,
    app_error_handler,
    http_error_handler,
    request_validation_error_handler,
    unhandled_exception_handler,
)
from complipilot.core.middleware.request_id import RequestIdMiddleware


def _make_app():
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    @app.get("/upstream")
    async def upstream():
        raise UpstreamError("Failed to generate report. Please try again.", details="LLM API timeout")

    @app.get("/items/{item_id}")
    async def item(item_id: int):
        return {"item_id": item_id}

    return app


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("application/json")
    body = resp.json()
    rid = resp.headers.get("x-request-id")
    assert body["error"]["code"] == "not_found"
    assert body["error"]["request_id"] == rid
    assert body["detail"] == body["error"]["message"]


def test_bad_json_body_is_400(client):
    resp = client.post(
        "/api/generate",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_framework_validation_is_400():
    client = TestClient(_make_app())
    resp = client.get("/items/abc")
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["code"] == "validation_error"
    assert "item_id" in body["error"]["message"]


def test_unhandled_exception_is_json_500_with_debug():
    client = TestClient(_make_app(), raise_server_exceptions=False)
    resp = client.get("/boom")
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"]["code"] == "internal_error"
    assert body["error"]["message"] == "Something went wrong. Please try again later."
    assert body["debug"] == "kaboom"


def test_unhandled_exception_hides_debug_in_production():
    settings.ENV = "production"
    client = TestClient(_make_app(), raise_server_exceptions=False)
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert "debug" not in resp.json()


def test_upstream_error_details_only_outside_production():
    client = TestClient(_make_app())
    body = client.get("/upstream").json()
    assert body["error"]["code"] == "upstream_error"
    assert body["details"] == "LLM API timeout"

    settings.ENV = "production"
    body = client.get("/upstream").json()
    assert "details" not in body


def test_request_id_is_echoed_in_error_body():
    client = TestClient(_make_app())
    resp = client.get("/upstream", headers={"X-Request-Id": "rid-42"})
    assert resp.headers["x-request-id"] == "rid-42"
    assert resp.json()["error"]["request_id"] == "rid-42"
