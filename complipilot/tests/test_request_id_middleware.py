import logging

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from complipilot.core.logging import get_request_id
from complipilot.core.middleware.request_id import RequestIdMiddleware


def _make_app():
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware)

    @app.get("/")
    async def root(request: Request):
        return {
            "request_id": getattr(request.state, "request_id", None),
            "context_id": get_request_id(),
        }

    return app


def test_generates_request_id_when_missing():
    client = TestClient(_make_app())

    resp = client.get("/")
    assert resp.status_code == 200
    rid_header = resp.headers.get("x-request-id")
    body = resp.json()

    assert rid_header
    assert body["request_id"] == rid_header
    assert body["context_id"] == rid_header


def test_echoes_provided_request_id():
    client = TestClient(_make_app())

    provided = "test-rid-123"
    resp = client.get("/", headers={"X-Request-Id": provided})

    assert resp.headers.get("x-request-id") == provided
    assert resp.json()["request_id"] == provided


def test_logs_request_completion(caplog):
    client = TestClient(_make_app())
    with caplog.at_level(logging.INFO, logger="complipilot"):
        client.get("/", headers={"X-Request-Id": "rid-log"})

    records = [r for r in caplog.records if r.getMessage() == "request.complete"]
    assert records
    assert records[-1].request_id == "rid-log"
    assert records[-1].status == 200
    assert records[-1].path == "/"


def test_unsafe_request_id_is_replaced():
    client = TestClient(_make_app())

    resp = client.get("/", headers={"X-Request-Id": "bad id\tinjected"})

    rid = resp.headers.get("x-request-id")
    assert rid != "bad id\tinjected"
    assert resp.json()["request_id"] == rid


def test_completion_log_carries_client_ip(caplog):
    client = TestClient(_make_app())
    with caplog.at_level(logging.INFO, logger="complipilot"):
        client.get("/", headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})

    record = [r for r in caplog.records if r.getMessage() == "request.complete"][-1]
    assert record.client_ip == "203.0.113.9"
    assert record.method == "GET"
    assert record.latency_bucket


def test_failed_request_is_logged_and_context_cleared(caplog):
    app = _make_app()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("boom")

    client = TestClient(app, raise_server_exceptions=False)
    with caplog.at_level(logging.INFO, logger="complipilot"):
        resp = client.get("/boom", headers={"X-Request-Id": "rid-boom"})

    assert resp.status_code == 500
    failed = [r for r in caplog.records if r.getMessage() == "request.failed"]
    assert failed and failed[-1].request_id == "rid-boom"
    assert get_request_id() is None
