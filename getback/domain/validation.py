"""Validation gate for inbound trip, search and subscription payloads.

Raw request mappings are copied field by field into a draft, every field is
checked, and all violations are reported together in one ``ValidationError``.
Only after the syntactic pass do we consult reference data, which fails with
the distinct ``ReferenceNotFoundError``. Nothing here touches storage.
"""

from __future__ import annotations

import datetime as dt
import html
import re
from collections.abc import Mapping
from typing import Any, Protocol

from getback.domain.exceptions import ReferenceNotFoundError, ValidationError
from getback.domain.models import MAX_OTHER_MEMBERS_LIMIT, SearchCriteria, TripDraft

_FIELD_ALIASES = {
    "maxOtherMembers": "max_other_members",
    "tripDate": "trip_date",
    "tripHour": "trip_hour",
    "tripQuarterHour": "trip_quarter_hour",
    "tripName": "trip_name",
}
_TRIP_FIELDS = (
    "max_other_members",
    "trip_date",
    "trip_hour",
    "trip_quarter_hour",
    "trip_name",
    "college",
    "airport",
)
_INT_RE = re.compile(r"^[+-]?\d+$")
_QUARTER_STEP = 15


class ReferenceLookup(Protocol):
    def airport_codes(self) -> frozenset[str]: ...

    def colleges(self) -> frozenset[str]: ...


def escape_text(value: str) -> str:
    return html.escape(value, quote=True)


def populate_trip_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Copy recognised keys (camelCase or snake_case) out of a raw payload."""
    draft: dict[str, Any] = {}
    for key, value in raw.items():
        name = _FIELD_ALIASES.get(key, key)
        if name in _TRIP_FIELDS:
            draft[name] = value
    return draft


def _as_int(value: Any) -> int | None:
    # bool is an int subclass; a JSON true must not pass as 1
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return int(value.strip())
    return None


def _as_date(value: Any) -> dt.date | None:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        return None
    raw = value.strip()
    try:
        if len(raw) == 10:
            return dt.date.fromisoformat(raw)
        return dt.datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _check_int(
    draft: Mapping[str, Any],
    name: str,
    low: int,
    high: int | None,
    errors: dict[str, str],
) -> int | None:
    if name not in draft or draft[name] is None:
        errors[name] = "is required"
        return None
    number = _as_int(draft[name])
    if number is None:
        errors[name] = "must be an integer"
        return None
    if number < low or (high is not None and number > high):
        bound = f"between {low} and {high}" if high is not None else f"at least {low}"
        errors[name] = f"must be {bound}"
        return None
    return number


def _check_date(draft: Mapping[str, Any], name: str, errors: dict[str, str]) -> dt.date | None:
    if name not in draft or draft[name] in (None, ""):
        errors[name] = "is required"
        return None
    parsed = _as_date(draft[name])
    if parsed is None:
        errors[name] = "must be a valid date"
    return parsed


def _check_text(draft: Mapping[str, Any], name: str, errors: dict[str, str]) -> str | None:
    value = draft.get(name)
    if not isinstance(value, str) or not value.strip():
        errors[name] = "must be a non-empty string"
        return None
    return escape_text(value.strip())


def _check_quarter_hour(draft: Mapping[str, Any], errors: dict[str, str]) -> int | None:
    quarter = _check_int(draft, "trip_quarter_hour", 0, 45, errors)
    if quarter is not None and quarter % _QUARTER_STEP != 0:
        errors["trip_quarter_hour"] = "must be one of 0, 15, 30, 45"
        return None
    return quarter


def validate_trip_fields(raw: Mapping[str, Any]) -> TripDraft:
    draft = populate_trip_fields(raw)
    errors: dict[str, str] = {}

    max_other_members = _check_int(draft, "max_other_members", 0, MAX_OTHER_MEMBERS_LIMIT, errors)
    trip_date = _check_date(draft, "trip_date", errors)
    trip_hour = _check_int(draft, "trip_hour", 0, 23, errors)
    trip_quarter_hour = _check_quarter_hour(draft, errors)
    trip_name = _check_text(draft, "trip_name", errors)
    college = _check_text(draft, "college", errors)
    airport = _check_text(draft, "airport", errors)

    if errors:
        raise ValidationError(errors)

    return TripDraft(
        max_other_members=max_other_members,
        trip_date=trip_date,
        trip_hour=trip_hour,
        trip_quarter_hour=trip_quarter_hour,
        trip_name=trip_name,
        college=college,
        airport=airport,
    )


def check_references(draft: TripDraft | SearchCriteria, reference: ReferenceLookup) -> None:
    if draft.airport not in reference.airport_codes():
        raise ReferenceNotFoundError("airport", draft.airport)
    if draft.college not in reference.colleges():
        raise ReferenceNotFoundError("college", draft.college)


def validate_trip_request(raw: Mapping[str, Any], reference: ReferenceLookup) -> TripDraft:
    draft = validate_trip_fields(raw)
    check_references(draft, reference)
    return draft


def build_search_criteria(raw: Mapping[str, Any]) -> SearchCriteria:
    draft = populate_trip_fields(raw)
    errors: dict[str, str] = {}
    trip_date = _check_date(draft, "trip_date", errors)
    trip_hour = _check_int(draft, "trip_hour", 0, 23, errors)
    college = _check_text(draft, "college", errors)
    airport = _check_text(draft, "airport", errors)
    if errors:
        raise ValidationError(errors)
    return SearchCriteria(trip_date=trip_date, trip_hour=trip_hour, college=college, airport=airport)


def validate_subscription_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Subscriptions carry the route and time of a trip, without name or capacity."""
    draft = populate_trip_fields(raw)
    draft.setdefault("trip_quarter_hour", 0)
    errors: dict[str, str] = {}
    fields = {
        "trip_date": _check_date(draft, "trip_date", errors),
        "trip_hour": _check_int(draft, "trip_hour", 0, 23, errors),
        "trip_quarter_hour": _check_quarter_hour(draft, errors),
        "college": _check_text(draft, "college", errors),
        "airport": _check_text(draft, "airport", errors),
    }
    if errors:
        raise ValidationError(errors)
    return fields


__all__ = [
    "ReferenceLookup",
    "build_search_criteria",
    "check_references",
    "escape_text",
    "populate_trip_fields",
    "validate_subscription_fields",
    "validate_trip_fields",
    "validate_trip_request",
]
