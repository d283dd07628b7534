"""SparkPost emailer and the outbound HTTP client it rides on."""

from __future__ import annotations

import datetime as dt
import json

import httpx
import pytest

from getback.config.settings import GetBackSettings
from getback.infrastructure.emailer import DisabledEmailer, SparkPostEmailer, format_trip_time, get_emailer
from getback.security.http_client import SecureHttpClient
from getback.shared.exceptions import ExternalServiceError, KeyMissingError

ENDPOINT = "https://api.sparkpost.test/api/v1/transmissions"


def _emailer(handler) -> SparkPostEmailer:
    client = SecureHttpClient(timeout=2.0, max_retries=1, service_name="sparkpost", transport=httpx.MockTransport(handler))
    return SparkPostEmailer(api_key="sp-key-123", from_address="noreply@getback.test", endpoint=ENDPOINT, http_client=client)


def _send(emailer: SparkPostEmailer, recipients: list[str]) -> None:
    emailer.subscriber_notification(
        recipients, "Harvard University", "BOS", dt.date(2026, 11, 25), 13, 15, "owner@harvard.edu"
    )


@pytest.mark.parametrize(
    ("hour", "quarter", "expected"),
    [(0, 0, "12:00 AM"), (9, 45, "9:45 AM"), (12, 30, "12:30 PM"), (13, 15, "1:15 PM")],
)
def test_format_trip_time(hour, quarter, expected):
    assert format_trip_time(hour, quarter) == expected


def test_sparkpost_posts_one_transmission(capsys):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"results": {"total_accepted_recipients": 2}})

    _send(_emailer(handler), ["a@harvard.edu", "b@harvard.edu"])

    [request] = seen
    body = json.loads(request.content)
    assert request.headers["Authorization"] == "sp-key-123"
    assert body["recipients"] == [{"address": "a@harvard.edu"}, {"address": "b@harvard.edu"}]
    assert body["content"]["subject"] == "GetBack Notification"
    assert "1:15 PM" in body["content"]["html"]
    assert "notification_partial" not in capsys.readouterr().err


def test_sparkpost_logs_partial_acceptance(capsys):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": {"total_accepted_recipients": 1}})

    _send(_emailer(handler), ["a@harvard.edu", "b@harvard.edu"])

    assert "notification_partial" in capsys.readouterr().err


def test_sparkpost_skips_empty_recipient_list():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    _send(_emailer(handler), [])


def test_client_error_is_not_retried_and_key_is_redacted():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(401, json={"errors": [{"message": "Unauthorized"}]})

    with pytest.raises(ExternalServiceError) as err:
        _send(_emailer(handler), ["a@harvard.edu"])
    assert len(calls) == 1
    assert "HTTP 401" in str(err.value)
    assert "sp-key-123" not in str(err.value)


def test_server_error_is_retried(monkeypatch):
    monkeypatch.setattr("getback.security.http_client.time.sleep", lambda _seconds: None)
    responses = [httpx.Response(503), httpx.Response(200, json={"results": {"total_accepted_recipients": 1}})]

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.pop(0)

    _send(_emailer(handler), ["a@harvard.edu"])
    assert responses == []


def test_get_emailer_requires_mode_and_key():
    assert isinstance(get_emailer(GetBackSettings()), DisabledEmailer)
    assert isinstance(get_emailer(GetBackSettings(production=True)), DisabledEmailer)
    assert isinstance(get_emailer(GetBackSettings(mail_debug=True, sparkpost_api_key="k")), SparkPostEmailer)
    assert get_emailer(GetBackSettings(production=True, sparkpost_api_key="k")).is_send_active()


def test_sparkpost_needs_an_api_key():
    with pytest.raises(KeyMissingError):
        SparkPostEmailer(api_key=" ", from_address="noreply@getback.test", endpoint=ENDPOINT)
