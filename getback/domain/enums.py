"""Domain enums."""

from enum import Enum


class Direction(str, Enum):
    FROM_CAMPUS = "from_campus"
    FROM_AIRPORT = "from_airport"

    @classmethod
    def from_path(cls, raw: str) -> "Direction":
        """Accept ``from-campus`` style path segments as well as enum values."""
        return cls(raw.strip().lower().replace("-", "_"))


class TripErrorCode(str, Enum):
    """Store-level error codes. Callers branch on these, never on message text."""

    NOT_FOUND = "not_found"
    TRIP_FULL = "trip_full"
    ALREADY_MEMBER = "already_member"
    DATABASE_ERROR = "database_error"


class FailureKind(str, Enum):
    VALIDATION = "validation"
    REFERENCE_NOT_FOUND = "reference_not_found"
    NOT_FOUND = "not_found"
    TRIP_FULL = "trip_full"
    ALREADY_MEMBER = "already_member"
    PERSISTENCE = "persistence"
    INTERNAL_INCONSISTENCY = "internal_inconsistency"
    UNEXPECTED = "unexpected"


class TripRelation(str, Enum):
    OWNED = "owned"
    MEMBER = "member"


class OrphanKind(str, Enum):
    OWNED_TRIP = "owned_trip"
    MEMBER_TRIP = "member_trip"
