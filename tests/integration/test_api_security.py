"""API bearer auth and diagnostics gating."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from getback.api.main import app, get_app_context
from getback.domain.enums import Direction, OrphanKind
from getback.security.auth import IDENTITY_HEADER

client = TestClient(app)

ME = {IDENTITY_HEADER: "me@harvard.edu"}


@pytest.fixture(autouse=True)
def api_ctx(memory_ctx):
    app.dependency_overrides[get_app_context] = lambda: memory_ctx
    yield memory_ctx
    app.dependency_overrides.clear()


def _require_api_auth(monkeypatch):
    monkeypatch.setenv("ALLOW_UNAUTHENTICATED_API", "false")


def test_api_bearer_auth(monkeypatch):
    _require_api_auth(monkeypatch)
    monkeypatch.setenv("API_BEARER_TOKEN", "api_token")

    missing = client.get("/users/me/trips", headers=ME)
    assert missing.status_code == 401

    wrong = client.get("/users/me/trips", headers={**ME, "Authorization": "Bearer wrong"})
    assert wrong.status_code == 403

    ok = client.get("/users/me/trips", headers={**ME, "Authorization": "Bearer api_token"})
    assert ok.status_code == 200


def test_api_without_configured_token_refuses_requests(monkeypatch):
    _require_api_auth(monkeypatch)

    resp = client.get("/users/me/trips", headers=ME)
    assert resp.status_code == 503


def test_health_needs_no_auth(monkeypatch):
    _require_api_auth(monkeypatch)
    assert client.get("/health").status_code == 200


def test_identity_comes_from_the_identity_header_lower_cased():
    missing = client.get("/users/me/trips")
    assert missing.status_code == 401

    resp = client.post(
        "/subscriptions/from-campus",
        headers={IDENTITY_HEADER.lower(): "Me@Harvard.EDU"},
        json={"tripDate": "2026-11-25", "tripHour": 14, "college": "Harvard University", "airport": "BOS"},
    )
    assert resp.status_code == 200
    assert resp.json()["email"] == "me@harvard.edu"


def test_diagnostics_disabled_by_default():
    resp = client.get("/diagnostics")
    assert resp.status_code == 404


def test_diagnostics_enabled_without_token_returns_503(monkeypatch):
    monkeypatch.setenv("ENABLE_DIAGNOSTICS", "true")

    resp = client.get("/diagnostics")
    assert resp.status_code == 503


def test_diagnostics_bearer_auth(monkeypatch, api_ctx):
    monkeypatch.setenv("ENABLE_DIAGNOSTICS", "true")
    monkeypatch.setenv("DIAGNOSTICS_TOKEN", "diag_token_value")
    api_ctx.reconciliation_log.record_orphan(
        OrphanKind.OWNED_TRIP, Direction.FROM_CAMPUS, "b" * 32, "me@harvard.edu", "database_error"
    )

    missing = client.get("/diagnostics")
    assert missing.status_code == 401

    wrong = client.get("/diagnostics", headers={"Authorization": "Bearer wrong"})
    assert wrong.status_code == 403

    ok = client.get("/diagnostics", headers={"Authorization": "Bearer diag_token_value"})
    assert ok.status_code == 200
    body = ok.json()
    assert body["stores"]["trips"] == "memory"
    assert body["reconciliation"]["unresolved"] == 1
    assert body["mail"]["enabled"] is True
