"""Subscriptions and subscriber notification for newly created trips."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from getback.application.context import AppContext
from getback.application.contracts import MembershipFailure, failure_from_store
from getback.domain.enums import Direction, FailureKind, TripErrorCode
from getback.domain.exceptions import ReferenceNotFoundError, ValidationError
from getback.domain.models import SearchCriteria, Subscription, Trip
from getback.domain.validation import check_references, validate_subscription_fields
from getback.shared.result import Left, Result, Right


def subscribe(
    ctx: AppContext,
    email: str,
    raw: Mapping[str, Any],
    direction: Direction,
) -> Result[MembershipFailure, Subscription]:
    try:
        fields = validate_subscription_fields(raw)
        subscription = Subscription(email=email, direction=direction, **fields)
        check_references(subscription, ctx.reference)
    except ValidationError as exc:
        return Left(MembershipFailure(kind=FailureKind.VALIDATION, message=str(exc), fields=exc.fields))
    except ReferenceNotFoundError as exc:
        return Left(
            MembershipFailure(
                kind=FailureKind.REFERENCE_NOT_FOUND,
                message=str(exc),
                fields={exc.field: "unknown value"},
            )
        )

    def _on_error(code: TripErrorCode) -> Left[MembershipFailure]:
        ctx.logger.error("subscribe_failed", f"could not save subscription: {code.value}")
        return Left(failure_from_store(code, "could not save subscription"))

    stored = ctx.subscription_store.add_subscription(subscription)
    return stored.case_of(left=_on_error, right=Right)


def notify_subscribers(ctx: AppContext, trip: Trip, direction: Direction) -> None:
    """Email everyone subscribed to this trip's route and time.

    Fire-and-forget: failures are logged and never reach the caller.
    """
    criteria = SearchCriteria(
        trip_date=trip.trip_date,
        trip_hour=trip.trip_hour,
        college=trip.college,
        airport=trip.airport,
    )
    try:
        found = ctx.subscription_store.find_subscribers(criteria, direction)
        recipients = found.case_of(
            left=lambda code: None,
            right=lambda emails: [email for email in emails if email != trip.owner_email],
        )
        if recipients is None:
            ctx.logger.error("notify_lookup_failed", "could not load subscribers", trip_id=trip.trip_id)
            return
        ctx.emailer.subscriber_notification(
            recipients,
            trip.origin(direction),
            trip.destination(direction),
            trip.trip_date,
            trip.trip_hour,
            trip.trip_quarter_hour,
            trip.owner_email,
        )
    except Exception as exc:
        ctx.logger.error(
            "notify_failed",
            "Exception sending notifications",
            exc=exc,
            trip_id=trip.trip_id,
        )


__all__ = ["notify_subscribers", "subscribe"]
