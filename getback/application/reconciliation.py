"""Out-of-band repair for trip writes whose user-list append was lost."""

from __future__ import annotations

from getback.application.context import AppContext
from getback.application.contracts import MembershipFailure, failure_from_store
from getback.domain.enums import FailureKind, OrphanKind, TripErrorCode
from getback.persistence.models import OrphanRecord
from getback.shared.result import Left, Result, Right

RELINKED = "relinked"
TRIP_GONE = "trip_gone"
ALREADY_RESOLVED = "already_resolved"


def _relink(ctx: AppContext, record: OrphanRecord) -> Result[MembershipFailure, str]:
    if record.kind is OrphanKind.OWNED_TRIP:
        appended = ctx.user_store.add_owned_trip(record.email, record.trip_id, record.direction)
    else:
        appended = ctx.user_store.add_member_trip(record.email, record.trip_id, record.direction)

    def _done(ok: bool) -> Result[MembershipFailure, str]:
        if not ok:
            return Left(MembershipFailure(kind=FailureKind.UNEXPECTED, message="user store reported no change"))
        ctx.reconciliation_log.mark_resolved(record.orphan_id)
        ctx.logger.info("orphan_resolved", f"orphan {record.orphan_id} relinked", trip_id=record.trip_id)
        return Right(RELINKED)

    return appended.case_of(
        left=lambda code: Left(failure_from_store(code, "could not save to user")),
        right=_done,
    )


def resolve_orphan(ctx: AppContext, orphan_id: int) -> Result[MembershipFailure, str]:
    """Re-apply the missing append, or close the record if its trip was deleted."""
    record = ctx.reconciliation_log.get_orphan(orphan_id)
    if record is None:
        return Left(MembershipFailure(kind=FailureKind.NOT_FOUND, message=f"no orphan {orphan_id}"))
    if record.resolved:
        return Right(ALREADY_RESOLVED)

    def _trip_missing(code: TripErrorCode) -> Result[MembershipFailure, str]:
        if code is not TripErrorCode.NOT_FOUND:
            return Left(failure_from_store(code, "could not load trip"))
        ctx.reconciliation_log.mark_resolved(record.orphan_id)
        ctx.logger.info("orphan_resolved", f"orphan {record.orphan_id} closed, trip is gone", trip_id=record.trip_id)
        return Right(TRIP_GONE)

    found = ctx.trip_store.get_trip(record.trip_id, record.direction)
    return found.case_of(left=_trip_missing, right=lambda trip: _relink(ctx, record))


__all__ = ["ALREADY_RESOLVED", "RELINKED", "TRIP_GONE", "resolve_orphan"]
