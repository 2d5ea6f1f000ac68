"""Tests for the per-user report store (/api/reports)."""

import hashlib

import pytest
from sqlalchemy import select

from complipilot.core.database import compliance_reports

REPORT = {
    "name": "Acme Annual Report 2025",
    "entityName": "Acme LLC",
    "entityType": "LLC",
    "jurisdiction": "California",
    "filingType": "Annual Report",
    "deadline": "2025-06-30",
    "htmlContent": "<h1>Report</h1><p>Body</p>",
    "toolkitCode": "complipilot",
}


def _save(client, headers, **overrides):
    resp = client.post("/api/reports/save", json={**REPORT, **overrides}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_save_requires_authentication(client):
    resp = client.post("/api/reports/save", json=REPORT)
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "unauthorized"


def test_rejects_garbage_token(client):
    resp = client.get(
        "/api/reports/list",
        params={"toolkit": "complipilot"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert resp.status_code == 401


def test_rejects_expired_token(client, make_token):
    token = make_token("user-a", expires_in=-60)
    resp = client.get(
        "/api/reports/list",
        params={"toolkit": "complipilot"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Token expired"


def test_save_returns_record_with_checksum(client, auth_headers):
    saved = _save(client, auth_headers("user-a"))
    assert saved["id"]
    assert saved["userId"] == "user-a"
    assert saved["toolkitCode"] == "complipilot"
    assert saved["createdAt"]
    expected = hashlib.md5(b"Acme LLC-California-Annual Report").hexdigest()
    assert saved["checksum"] == expected


def test_client_ownership_fields_are_ignored(client, auth_headers):
    saved = _save(
        client,
        auth_headers("user-a"),
        userId="user-b",
        user_id="user-b",
        ownerId="user-b",
        id="forced-id",
        createdAt="1999-01-01T00:00:00Z",
    )
    assert saved["userId"] == "user-a"
    assert saved["id"] != "forced-id"
    assert not saved["createdAt"].startswith("1999")


def test_stored_row_is_owned_by_caller(client, auth_headers, db_session):
    saved = _save(client, auth_headers("user-a"), ownerId="user-b")
    row = db_session.execute(
        select(compliance_reports).where(compliance_reports.c.id == saved["id"])
    ).mappings().one()
    assert row["user_id"] == "user-a"
    assert "owner_id" not in row


def test_saved_html_is_sanitized(client, auth_headers):
    headers = auth_headers("user-a")
    saved = _save(
        client,
        headers,
        htmlContent='<h2 class="title" style="color:red">Hi</h2><script>alert(1)</script><img src=x onerror="alert(2)">',
    )
    fetched = client.get(f"/api/reports/{saved['id']}", headers=headers).json()
    html = fetched["htmlContent"]
    assert "<script" not in html.lower()
    assert "alert(1)" not in html
    assert "onerror" not in html
    assert '<h2 class="title"' in html


def test_missing_required_fields_is_400(client, auth_headers):
    resp = client.post(
        "/api/reports/save",
        json={"entityName": "Acme"},
        headers=auth_headers("user-a"),
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["code"] == "validation_error"
    assert "name" in body["fields"]


def test_list_is_scoped_to_owner_and_toolkit(client, auth_headers):
    a, b = auth_headers("user-a"), auth_headers("user-b")
    _save(client, a, name="A1")
    _save(client, a, name="A2")
    _save(client, a, name="A-grant", toolkitCode="grantgenie")
    _save(client, b, name="B1")

    listed = client.get("/api/reports/list", params={"toolkit": "complipilot"}, headers=a).json()
    assert sorted(r["name"] for r in listed) == ["A1", "A2"]
    assert all("htmlContent" not in r for r in listed)

    listed_b = client.get("/api/reports/list", params={"toolkit": "complipilot"}, headers=b).json()
    assert [r["name"] for r in listed_b] == ["B1"]


def test_list_is_newest_first(client, auth_headers):
    headers = auth_headers("user-a")
    for name in ("first", "second", "third"):
        _save(client, headers, name=name)
    listed = client.get("/api/reports/list?toolkit=complipilot", headers=headers).json()
    stamps = [r["createdAt"] for r in listed]
    assert len(stamps) == 3
    assert stamps == sorted(stamps, reverse=True)


def test_list_requires_toolkit(client, auth_headers):
    resp = client.get("/api/reports/list", headers=auth_headers("user-a"))
    assert resp.status_code == 400


@pytest.mark.parametrize("method", ["get", "delete"])
def test_other_users_report_is_not_found(client, auth_headers, method):
    saved = _save(client, auth_headers("user-a"))
    resp = getattr(client, method)(f"/api/reports/{saved['id']}", headers=auth_headers("user-b"))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "not_found"

    # Still there for the owner
    assert client.get(f"/api/reports/{saved['id']}", headers=auth_headers("user-a")).status_code == 200


def test_delete_own_report(client, auth_headers):
    headers = auth_headers("user-a")
    saved = _save(client, headers)
    resp = client.delete(f"/api/reports/{saved['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get(f"/api/reports/{saved['id']}", headers=headers).status_code == 404


def test_missing_report_is_not_found(client, auth_headers):
    resp = client.get("/api/reports/does-not-exist", headers=auth_headers("user-a"))
    assert resp.status_code == 404


def test_stored_report_pdf(client, auth_headers):
    headers = auth_headers("user-a")
    saved = _save(client, headers)
    resp = client.get(f"/api/reports/{saved['id']}/pdf", headers=headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")
    assert "CompliPilot_Report.pdf" in resp.headers["content-disposition"]

    other = client.get(f"/api/reports/{saved['id']}/pdf", headers=auth_headers("user-b"))
    assert other.status_code == 404
