"""Thread-safe in-memory stores.

Joins are serialized per trip identity: a lock keyed by trip id covers the
read-compare-append sequence, so joins on different trips never wait on each
other beyond the short lock-table lookup. Locks are registered when a trip is
created and dropped when it is deleted; lookups on unknown ids add nothing.
"""

from __future__ import annotations

import itertools
import threading
import uuid
from datetime import datetime, timezone

from getback.domain.enums import Direction, OrphanKind, TripErrorCode, TripRelation
from getback.domain.models import CreateTripQuery, SearchCriteria, Subscription, Trip, User, user_list_name
from getback.persistence.models import OrphanRecord
from getback.shared.result import Left, Result, Right


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryTripStore:
    backend = "memory"

    def __init__(self) -> None:
        self._trips: dict[Direction, dict[str, Trip]] = {direction: {} for direction in Direction}
        self._trip_locks: dict[tuple[Direction, str], threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, trip_id: str, direction: Direction) -> threading.Lock | None:
        """The lock registered when the trip was created; None for unknown ids."""
        with self._registry_lock:
            return self._trip_locks.get((direction, trip_id))

    def create_trip(self, query: CreateTripQuery, direction: Direction) -> Result[TripErrorCode, Trip]:
        trip = Trip(
            trip_id=uuid.uuid4().hex,
            owner_email=query.owner_email,
            max_other_members=query.max_other_members,
            trip_date=query.trip_date,
            trip_hour=query.trip_hour,
            trip_quarter_hour=query.trip_quarter_hour,
            trip_name=query.trip_name,
            college=query.college,
            airport=query.airport,
            member_emails=[],
            created_at=_now(),
        )
        with self._registry_lock:
            self._trip_locks[(direction, trip.trip_id)] = threading.Lock()
            self._trips[direction][trip.trip_id] = trip
        return Right(trip.model_copy(deep=True))

    def get_trip(self, trip_id: str, direction: Direction) -> Result[TripErrorCode, Trip]:
        lock = self._lock_for(trip_id, direction)
        if lock is None:
            return Left(TripErrorCode.NOT_FOUND)
        with lock:
            # a delete may have won the lock first
            trip = self._trips[direction].get(trip_id)
            if trip is None:
                return Left(TripErrorCode.NOT_FOUND)
            return Right(trip.model_copy(deep=True))

    def add_user_to_trip(self, trip_id: str, email: str, direction: Direction) -> Result[TripErrorCode, bool]:
        lock = self._lock_for(trip_id, direction)
        if lock is None:
            return Left(TripErrorCode.NOT_FOUND)
        with lock:
            trip = self._trips[direction].get(trip_id)
            if trip is None:
                return Left(TripErrorCode.NOT_FOUND)
            if email == trip.owner_email or email in trip.member_emails:
                return Left(TripErrorCode.ALREADY_MEMBER)
            if len(trip.member_emails) >= trip.max_other_members:
                return Left(TripErrorCode.TRIP_FULL)
            self._trips[direction][trip_id] = trip.model_copy(
                update={"member_emails": [*trip.member_emails, email]}
            )
            return Right(True)

    def delete_trip(self, trip_id: str, requester_email: str, direction: Direction) -> Result[TripErrorCode, bool]:
        lock = self._lock_for(trip_id, direction)
        if lock is None:
            return Right(False)
        with lock:
            trip = self._trips[direction].get(trip_id)
            if trip is None or trip.owner_email != requester_email:
                return Right(False)
            with self._registry_lock:
                del self._trips[direction][trip_id]
                self._trip_locks.pop((direction, trip_id), None)
        return Right(True)

    def search_trips(self, criteria: SearchCriteria, direction: Direction) -> Result[TripErrorCode, list[Trip]]:
        with self._registry_lock:
            snapshot = list(self._trips[direction].values())
        matches = [
            trip.model_copy(deep=True)
            for trip in snapshot
            if trip.trip_date == criteria.trip_date
            and trip.trip_hour == criteria.trip_hour
            and trip.college == criteria.college
            and trip.airport == criteria.airport
        ]
        matches.sort(key=lambda trip: (trip.trip_quarter_hour, trip.created_at))
        return Right(matches)


class InMemoryUserStore:
    backend = "memory"

    def __init__(self) -> None:
        self._users: dict[str, dict[str, list[str]]] = {}
        self._lock = threading.Lock()

    def _append(
        self, email: str, trip_id: str, relation: TripRelation, direction: Direction
    ) -> Result[TripErrorCode, bool]:
        with self._lock:
            lists = self._users.setdefault(email, {})
            refs = lists.setdefault(user_list_name(relation, direction), [])
            if trip_id not in refs:
                refs.append(trip_id)
        return Right(True)

    def add_owned_trip(self, email: str, trip_id: str, direction: Direction) -> Result[TripErrorCode, bool]:
        return self._append(email, trip_id, TripRelation.OWNED, direction)

    def add_member_trip(self, email: str, trip_id: str, direction: Direction) -> Result[TripErrorCode, bool]:
        return self._append(email, trip_id, TripRelation.MEMBER, direction)

    def get_user(self, email: str) -> User | None:
        with self._lock:
            lists = self._users.get(email)
            if lists is None:
                return None
            return User(email=email, **{name: list(refs) for name, refs in lists.items()})


class InMemorySubscriptionStore:
    backend = "memory"

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()

    def add_subscription(self, subscription: Subscription) -> Result[TripErrorCode, Subscription]:
        with self._lock:
            self._subscriptions.append(subscription)
        return Right(subscription)

    def find_subscribers(self, criteria: SearchCriteria, direction: Direction) -> Result[TripErrorCode, list[str]]:
        with self._lock:
            emails = {
                sub.email
                for sub in self._subscriptions
                if sub.direction == direction
                and sub.trip_date == criteria.trip_date
                and sub.trip_hour == criteria.trip_hour
                and sub.college == criteria.college
                and sub.airport == criteria.airport
            }
        return Right(sorted(emails))


class InMemoryReconciliationLog:
    backend = "memory"

    def __init__(self) -> None:
        self._records: dict[int, OrphanRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def record_orphan(
        self,
        kind: OrphanKind,
        direction: Direction,
        trip_id: str,
        email: str,
        reason: str = "",
    ) -> OrphanRecord | None:
        with self._lock:
            record = OrphanRecord(
                orphan_id=next(self._ids),
                kind=kind,
                direction=direction,
                trip_id=trip_id,
                email=email,
                reason=reason,
                created_at=_now(),
            )
            self._records[record.orphan_id] = record
        return record

    def get_orphan(self, orphan_id: int) -> OrphanRecord | None:
        with self._lock:
            return self._records.get(orphan_id)

    def list_orphans(self, include_resolved: bool = False) -> list[OrphanRecord]:
        with self._lock:
            return [
                record
                for _, record in sorted(self._records.items())
                if include_resolved or not record.resolved
            ]

    def mark_resolved(self, orphan_id: int) -> bool:
        with self._lock:
            record = self._records.get(orphan_id)
            if record is None or record.resolved:
                return False
            self._records[orphan_id] = record.model_copy(update={"resolved": True})
            return True

    def unresolved_count(self) -> int:
        with self._lock:
            return sum(1 for record in self._records.values() if not record.resolved)


__all__ = [
    "InMemoryReconciliationLog",
    "InMemorySubscriptionStore",
    "InMemoryTripStore",
    "InMemoryUserStore",
]
