"""Domain layer exports."""

from getback.domain.enums import Direction, FailureKind, OrphanKind, TripErrorCode, TripRelation
from getback.domain.exceptions import DomainError, ReferenceNotFoundError, ValidationError
from getback.domain.models import (
    CreateTripQuery,
    SearchCriteria,
    Subscription,
    Trip,
    TripDraft,
    User,
)

__all__ = [
    "CreateTripQuery",
    "Direction",
    "DomainError",
    "FailureKind",
    "OrphanKind",
    "ReferenceNotFoundError",
    "SearchCriteria",
    "Subscription",
    "Trip",
    "TripDraft",
    "TripErrorCode",
    "TripRelation",
    "User",
    "ValidationError",
]
