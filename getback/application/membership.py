"""Membership coordinator: trip writes paired with the user-list writes they imply.

Each logical action is two independent writes, trip store first and user
store second. There is no cross-store transaction. When the first write fails
nothing else happens. When the second fails after the first committed, the
pair is recorded in the reconciliation log for out-of-band repair and the
action is reported as failed, even though the trip-side change persists.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from getback.application.context import AppContext
from getback.application.contracts import MembershipFailure, failure_from_store
from getback.domain.enums import Direction, FailureKind, OrphanKind, TripErrorCode
from getback.domain.exceptions import ReferenceNotFoundError, ValidationError
from getback.domain.models import CreateTripQuery, Trip
from getback.domain.validation import validate_trip_request
from getback.shared.result import Left, Result, Right

_BUSINESS_CODES = frozenset({TripErrorCode.NOT_FOUND, TripErrorCode.TRIP_FULL, TripErrorCode.ALREADY_MEMBER})


def _record_orphan(
    ctx: AppContext,
    kind: OrphanKind,
    direction: Direction,
    trip_id: str,
    email: str,
    reason: str,
) -> Left[MembershipFailure]:
    ctx.logger.error(
        "orphaned_trip_reference",
        f"trip {trip_id} committed but the {kind.value} reference for {email} was not saved",
        direction=direction.value,
        trip_id=trip_id,
        reason=reason,
    )
    record = ctx.reconciliation_log.record_orphan(kind, direction, trip_id, email, reason)
    if record is None:
        ctx.logger.error(
            "reconciliation_log_unavailable",
            f"orphan for trip {trip_id} could not be recorded",
            direction=direction.value,
            trip_id=trip_id,
        )
    return Left(
        MembershipFailure(
            kind=FailureKind.INTERNAL_INCONSISTENCY,
            message="problem saving to user",
        )
    )


def _trip_write_failed(ctx: AppContext, event: str, code: TripErrorCode) -> Left[MembershipFailure]:
    ctx.logger.error(event, f"trip store rejected the write: {code.value}")
    return Left(failure_from_store(code, "could not save trip"))


def _owner_linked(ctx: AppContext, trip: Trip, direction: Direction) -> Right[Trip]:
    ctx.logger.info("trip_created", f"trip {trip.trip_id} created", direction=direction.value)
    return Right(trip)


def _link_owner(ctx: AppContext, trip: Trip, direction: Direction) -> Result[MembershipFailure, Trip]:
    appended = ctx.user_store.add_owned_trip(trip.owner_email, trip.trip_id, direction)
    return appended.case_of(
        left=lambda code: _record_orphan(
            ctx, OrphanKind.OWNED_TRIP, direction, trip.trip_id, trip.owner_email, code.value
        ),
        right=lambda ok: _owner_linked(ctx, trip, direction)
        if ok
        else _record_orphan(
            ctx, OrphanKind.OWNED_TRIP, direction, trip.trip_id, trip.owner_email, "user store reported no change"
        ),
    )


def create_trip(
    ctx: AppContext,
    owner_email: str,
    raw: Mapping[str, Any],
    direction: Direction,
) -> Result[MembershipFailure, Trip]:
    try:
        draft = validate_trip_request(raw, ctx.reference)
    except ValidationError as exc:
        ctx.logger.debug("trip_validation_failed", str(exc), fields=exc.fields)
        return Left(MembershipFailure(kind=FailureKind.VALIDATION, message=str(exc), fields=exc.fields))
    except ReferenceNotFoundError as exc:
        ctx.logger.debug("trip_reference_missing", str(exc), field=exc.field)
        return Left(
            MembershipFailure(
                kind=FailureKind.REFERENCE_NOT_FOUND,
                message=str(exc),
                fields={exc.field: "unknown value"},
            )
        )

    query = CreateTripQuery(owner_email=owner_email, **draft.model_dump())
    created = ctx.trip_store.create_trip(query, direction)
    return created.case_of(
        left=lambda code: _trip_write_failed(ctx, f"create_trip_{direction.value}_failed", code),
        right=lambda trip: _link_owner(ctx, trip, direction),
    )


def _join_rejected(ctx: AppContext, code: TripErrorCode, trip_id: str) -> Left[MembershipFailure]:
    if code in _BUSINESS_CODES:
        ctx.logger.debug("join_rejected", f"join of trip {trip_id} rejected: {code.value}")
        return Left(failure_from_store(code))
    ctx.logger.error("join_failed", f"considered internal error: {code.value}", trip_id=trip_id)
    return Left(failure_from_store(code))


def _link_member(
    ctx: AppContext, email: str, trip_id: str, direction: Direction
) -> Result[MembershipFailure, bool]:
    appended = ctx.user_store.add_member_trip(email, trip_id, direction)
    return appended.case_of(
        left=lambda code: _record_orphan(ctx, OrphanKind.MEMBER_TRIP, direction, trip_id, email, code.value),
        right=lambda ok: Right(True)
        if ok
        else _record_orphan(
            ctx, OrphanKind.MEMBER_TRIP, direction, trip_id, email, "user store reported no change"
        ),
    )


def _join_unchanged(ctx: AppContext, trip_id: str) -> Left[MembershipFailure]:
    ctx.logger.error(
        "join_unexpected",
        f"conditional append on trip {trip_id} changed nothing although the trip was joinable",
        trip_id=trip_id,
    )
    return Left(MembershipFailure(kind=FailureKind.UNEXPECTED, message="unexpected error"))


def join_trip(
    ctx: AppContext,
    email: str,
    trip_id: str,
    direction: Direction,
) -> Result[MembershipFailure, bool]:
    joined = ctx.trip_store.add_user_to_trip(trip_id, email, direction)
    return joined.case_of(
        left=lambda code: _join_rejected(ctx, code, trip_id),
        right=lambda changed: _link_member(ctx, email, trip_id, direction)
        if changed
        else _join_unchanged(ctx, trip_id),
    )


def delete_trip(
    ctx: AppContext,
    email: str,
    trip_id: str,
    direction: Direction,
) -> Result[MembershipFailure, bool]:
    """Owner-only delete. Owner and member lists keep their references."""
    deleted = ctx.trip_store.delete_trip(trip_id, email, direction)

    def _on_error(code: TripErrorCode) -> Left[MembershipFailure]:
        ctx.logger.error("delete_trip_failed", f"failed to delete trip: {code.value}", trip_id=trip_id)
        return Left(failure_from_store(TripErrorCode.DATABASE_ERROR, "could not delete trip"))

    def _on_done(removed: bool) -> Result[MembershipFailure, bool]:
        if removed:
            ctx.logger.info("trip_deleted", f"trip {trip_id} deleted", direction=direction.value)
            return Right(True)
        return Left(MembershipFailure(kind=FailureKind.NOT_FOUND, message="could not delete trip"))

    return deleted.case_of(left=_on_error, right=_on_done)


__all__ = ["create_trip", "delete_trip", "join_trip"]
