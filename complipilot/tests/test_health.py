"""Tests for health, version and diagnostics endpoints."""

from unittest.mock import patch

from complipilot import __version__
from complipilot.core.config import settings


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_db_ping(client):
    resp = client.get("/api/db/ping")
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["database"] == "connected"
    assert body["dialect"] == "sqlite"


def test_db_ping_failure_is_500(client):
    with patch("complipilot.api.health.ping", side_effect=RuntimeError("db down")):
        resp = client.get("/api/db/ping")
    assert resp.status_code == 500
    assert resp.json() == {"ok": False, "error": "Database connection failed", "database": "disconnected"}


def test_version_reports_usage_configuration(client):
    settings.REPORT_CAP = "12"
    settings.BYPASS_IPS = "10.0.0.1,10.0.0.2"
    settings.FEATURE_USAGE_ENFORCEMENT = "off"
    body = client.get("/api/version").json()
    assert body["version"] == __version__
    assert body["usageLimiting"] == {
        "mode": "monitor-only",
        "enforcement": False,
        "reportCap": 12,
        "bypassIps": 2,
        "toolName": "elev8analyzer",
    }
    assert body["features"]["bypassLists"] is True
    assert body["features"]["monitorOnlyMode"] is True


def test_check_ip_prefers_vercel_header(client):
    resp = client.get(
        "/api/check-ip",
        headers={"X-Vercel-Forwarded-For": "203.0.113.5", "X-Forwarded-For": "198.51.100.1, 10.0.0.1"},
    )
    body = resp.json()
    assert body["detectedIp"] == "203.0.113.5"
    assert body["source"] == "x-vercel-forwarded-for"
    assert body["isUnknown"] is False
    assert body["headers"]["x-forwarded-for"] == "198.51.100.1, 10.0.0.1"
    assert "socket.remoteAddress" in body["headers"]
    assert body["timestamp"]


def test_check_ip_takes_first_forwarded_hop(client):
    body = client.get("/api/check-ip", headers={"X-Forwarded-For": " 198.51.100.1 , 10.0.0.1"}).json()
    assert body["detectedIp"] == "198.51.100.1"


def test_check_ip_falls_back_to_socket(client):
    body = client.get("/api/check-ip").json()
    assert body["source"] == "socket"
    assert body["detectedIp"] == "testclient"


def test_debug_usage_lists_caller_rows(client):
    headers = {"X-Real-IP": "192.0.2.77"}
    client.post("/api/usage?tool=grantgenie", headers=headers)
    body = client.get("/api/debug-usage", headers=headers).json()
    assert body["detectedIp"] == "192.0.2.77"
    assert [r["tool"] for r in body["usageRecords"]] == ["grantgenie"]


def test_debug_usage_hidden_in_production(client):
    settings.ENV = "production"
    assert client.get("/api/debug-usage").status_code == 404
