"""pytest global fixtures: environment isolation and store-backed contexts."""

from __future__ import annotations

import io

import pytest

from getback.application.context import AppContext
from getback.config.settings import GetBackSettings
from getback.infrastructure.logging import StructuredLogger
from getback.infrastructure.reference_data import load_reference_data
from getback.persistence.repository import StoreBundle, build_memory_stores, build_sqlite_stores

_ISOLATED_ENV = (
    "API_BEARER_TOKEN",
    "DIAGNOSTICS_TOKEN",
    "ENABLE_DIAGNOSTICS",
    "SPARKPOST_API_KEY",
    "GETBACK_PRODUCTION",
    "GETBACK_MAIL_DEBUG",
    "GETBACK_STORE_BACKEND",
    "GETBACK_DB_PATH",
    "GETBACK_DESTINATIONS_FILE",
    "CORS_ORIGINS",
    "GETBACK_HOST",
    "GETBACK_PORT",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """No real mail, no bearer token, no diagnostics unless a test opts in."""
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("ALLOW_UNAUTHENTICATED_API", "true")
    yield


class RecordingEmailer:
    def __init__(self) -> None:
        self.calls: list[dict] = []

    def is_send_active(self) -> bool:
        return True

    def subscriber_notification(
        self, recipients, origin, destination, trip_date, trip_hour, trip_quarter_hour, contact_email
    ) -> None:
        self.calls.append(
            {
                "recipients": list(recipients),
                "origin": origin,
                "destination": destination,
                "trip_date": trip_date,
                "trip_hour": trip_hour,
                "trip_quarter_hour": trip_quarter_hour,
                "contact_email": contact_email,
            }
        )


@pytest.fixture
def reference():
    return load_reference_data()


@pytest.fixture
def log_stream():
    return io.StringIO()


def _context(stores: StoreBundle, reference, log_stream, emailer=None) -> AppContext:
    return AppContext(
        trip_store=stores.trip_store,
        user_store=stores.user_store,
        subscription_store=stores.subscription_store,
        reconciliation_log=stores.reconciliation_log,
        reference=reference,
        emailer=emailer or RecordingEmailer(),
        logger=StructuredLogger("trips-test", output=log_stream, debug_enabled=True),
        settings=GetBackSettings(store_backend=stores.trip_store.backend),
    )


@pytest.fixture
def memory_ctx(reference, log_stream) -> AppContext:
    return _context(build_memory_stores(), reference, log_stream)


@pytest.fixture
def sqlite_ctx(tmp_path, reference, log_stream) -> AppContext:
    return _context(build_sqlite_stores(tmp_path / "getback.sqlite3"), reference, log_stream)


@pytest.fixture(params=["memory", "sqlite"])
def ctx(request, tmp_path, reference, log_stream) -> AppContext:
    """The same use-case test against both store backends."""
    if request.param == "memory":
        stores = build_memory_stores()
    else:
        stores = build_sqlite_stores(tmp_path / "getback.sqlite3")
    return _context(stores, reference, log_stream)


@pytest.fixture
def trip_payload():
    def _make(**overrides):
        payload = {
            "maxOtherMembers": 2,
            "tripDate": "2026-11-25",
            "tripHour": 14,
            "tripQuarterHour": 30,
            "tripName": "Thanksgiving run",
            "college": "Harvard University",
            "airport": "BOS",
        }
        payload.update(overrides)
        return payload

    return _make
