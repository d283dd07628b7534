"""Trip search with requester self-exclusion."""

from __future__ import annotations

from getback.application.context import AppContext
from getback.domain.enums import Direction, TripErrorCode
from getback.domain.models import SearchCriteria, Trip


def search_trips(
    ctx: AppContext,
    requester_email: str,
    criteria: SearchCriteria,
    direction: Direction,
) -> list[Trip]:
    """Matching trips the requester could join. Store failures yield ``[]``."""

    def _on_error(code: TripErrorCode) -> list[Trip]:
        ctx.logger.debug("search_failed", f"db exception when searching for trips: {code.value}")
        return []

    def _exclude_own(trips: list[Trip]) -> list[Trip]:
        return [trip for trip in trips if trip.owner_email != requester_email]

    return ctx.trip_store.search_trips(criteria, direction).case_of(left=_on_error, right=_exclude_own)


__all__ = ["search_trips"]
