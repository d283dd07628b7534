"""Application request/response contracts."""

from __future__ import annotations

from pydantic import BaseModel, Field

from getback.domain.enums import FailureKind, TripErrorCode


class MembershipFailure(BaseModel):
    kind: FailureKind
    message: str = ""
    fields: dict[str, str] = Field(default_factory=dict)

    @property
    def is_client_error(self) -> bool:
        return self.kind in CLIENT_FAILURES


CLIENT_FAILURES = frozenset(
    {
        FailureKind.VALIDATION,
        FailureKind.REFERENCE_NOT_FOUND,
        FailureKind.NOT_FOUND,
        FailureKind.TRIP_FULL,
        FailureKind.ALREADY_MEMBER,
    }
)

_STORE_CODE_TO_KIND = {
    TripErrorCode.NOT_FOUND: FailureKind.NOT_FOUND,
    TripErrorCode.TRIP_FULL: FailureKind.TRIP_FULL,
    TripErrorCode.ALREADY_MEMBER: FailureKind.ALREADY_MEMBER,
    TripErrorCode.DATABASE_ERROR: FailureKind.PERSISTENCE,
}


def failure_from_store(code: TripErrorCode, message: str = "") -> MembershipFailure:
    return MembershipFailure(kind=_STORE_CODE_TO_KIND[code], message=message or code.value)


__all__ = ["CLIENT_FAILURES", "MembershipFailure", "failure_from_store"]
