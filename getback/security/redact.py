"""Scrub the SparkPost key and API bearer tokens out of log and error text."""

from __future__ import annotations

import re

_REDACTED = "***REDACTED***"

# SPARKPOST_API_KEY=..., api_key=..., token=... in env dumps and query strings
_KEY_VALUE_RE = re.compile(
    r"(?i)(?P<prefix>\b(?:sparkpost[_-]api[_-]key|api[_-]?key|token|secret)\s*=\s*)(?P<value>[^&\s\"']+)"
)
# "api_key": "..." in JSON bodies echoed back by the mail API
_JSON_KV_RE = re.compile(
    r"(?i)(?P<prefix>[\"'](?:api[_-]?key|token|secret)[\"']\s*:\s*[\"']?)(?P<value>[^\"',\s}]+)"
)
# SparkPost takes the raw key in Authorization; the API edge takes "Bearer <token>"
_AUTH_HEADER_RE = re.compile(
    r"(?i)(?P<prefix>\bauthorization\s*:\s*(?:bearer\s+)?)(?P<value>[^\s,;]+)"
)
_BEARER_RE = re.compile(r"(?i)(?P<prefix>\bbearer\s+)(?P<value>[A-Za-z0-9._~+/=-]+)")

_PATTERNS = (_KEY_VALUE_RE, _JSON_KV_RE, _AUTH_HEADER_RE, _BEARER_RE)


def _mask(match: re.Match[str]) -> str:
    return f"{match.group('prefix')}{_REDACTED}"


def redact_sensitive(text: str) -> str:
    if not text:
        return text
    redacted = str(text)
    for pattern in _PATTERNS:
        redacted = pattern.sub(_mask, redacted)
    return redacted


__all__ = ["redact_sensitive"]
