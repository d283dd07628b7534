"""Static reference data: known airport codes and college names."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from getback.domain.validation import escape_text

_DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DEFAULT_DESTINATIONS_FILE = _DATA_DIR / "destinations.json"


class ReferenceDataError(RuntimeError):
    """Reference data file is missing or malformed."""


class ReferenceData:
    """Read-only sets shared by every request; built once at startup."""

    def __init__(self, airports: Iterable[str], colleges: Iterable[str]):
        self._airports = frozenset(escape_text(a.strip()) for a in airports if a and a.strip())
        self._colleges = frozenset(escape_text(c.strip()) for c in colleges if c and c.strip())

    def airport_codes(self) -> frozenset[str]:
        return self._airports

    def colleges(self) -> frozenset[str]:
        return self._colleges


def load_reference_data(path: str | Path | None = None) -> ReferenceData:
    source = Path(path) if path else DEFAULT_DESTINATIONS_FILE
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ReferenceDataError(f"reference data file not found: {source}") from exc
    except json.JSONDecodeError as exc:
        raise ReferenceDataError(f"reference data file is not valid JSON: {source}") from exc

    if not isinstance(payload, dict):
        raise ReferenceDataError(f"reference data must be a JSON object: {source}")
    airports = payload.get("airports")
    colleges = payload.get("colleges")
    if not isinstance(airports, list) or not isinstance(colleges, list):
        raise ReferenceDataError(f"reference data needs 'airports' and 'colleges' lists: {source}")
    return ReferenceData(
        airports=[str(item) for item in airports],
        colleges=[str(item) for item in colleges],
    )


__all__ = [
    "DEFAULT_DESTINATIONS_FILE",
    "ReferenceData",
    "ReferenceDataError",
    "load_reference_data",
]
