"""Redacting HTTP client - single exit point for outbound API calls.

Wraps httpx with a fixed timeout and retry policy and scrubs credentials out
of every error message before it can reach a log line.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from getback.security.redact import redact_sensitive
from getback.shared.exceptions import ExternalServiceError


class SecureHttpClient:
    def __init__(
        self,
        *,
        timeout: float = 10.0,
        max_retries: int = 1,
        service_name: str = "http",
        transport: httpx.BaseTransport | None = None,
    ):
        self._timeout = timeout
        self._max_retries = max(0, int(max_retries))
        self._service_name = service_name
        self._transport = transport

    def post_json(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """POST a JSON body and return the decoded JSON response."""
        last_error: Optional[Exception] = None

        for attempt in range(1, self._max_retries + 2):
            try:
                with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                    resp = client.post(url, json=payload, headers=headers)
                resp.raise_for_status()
                return resp.json()
            except httpx.HTTPStatusError as e:
                safe_msg = redact_sensitive(str(e))
                last_error = ExternalServiceError(
                    self._service_name, f"HTTP {e.response.status_code}: {safe_msg}"
                )
                # client errors will not improve on retry
                if e.response.status_code < 500:
                    break
            except httpx.TimeoutException:
                last_error = ExternalServiceError(
                    self._service_name, f"request timed out ({self._timeout}s), attempt {attempt}"
                )
            except httpx.HTTPError as e:
                last_error = ExternalServiceError(
                    self._service_name, f"request failed: {redact_sensitive(str(e))}"
                )
            except ValueError as e:
                last_error = ExternalServiceError(
                    self._service_name, f"invalid JSON response: {redact_sensitive(str(e))}"
                )
                break

            if attempt <= self._max_retries:
                time.sleep(0.5 * attempt)

        raise last_error  # type: ignore[misc]


__all__ = ["SecureHttpClient"]
