"""Store interfaces and backend factory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from getback.config.settings import GetBackSettings
from getback.domain.enums import Direction, OrphanKind, TripErrorCode
from getback.domain.models import CreateTripQuery, SearchCriteria, Subscription, Trip, User
from getback.persistence.memory_repository import (
    InMemoryReconciliationLog,
    InMemorySubscriptionStore,
    InMemoryTripStore,
    InMemoryUserStore,
)
from getback.persistence.models import OrphanRecord
from getback.persistence.sqlite_repository import (
    SQLiteDatabase,
    SQLiteReconciliationLog,
    SQLiteSubscriptionStore,
    SQLiteTripStore,
    SQLiteUserStore,
)
from getback.shared.result import Result


class TripStore(Protocol):
    backend: str

    def create_trip(self, query: CreateTripQuery, direction: Direction) -> Result[TripErrorCode, Trip]: ...

    def get_trip(self, trip_id: str, direction: Direction) -> Result[TripErrorCode, Trip]: ...

    def add_user_to_trip(
        self, trip_id: str, email: str, direction: Direction
    ) -> Result[TripErrorCode, bool]: ...

    def delete_trip(
        self, trip_id: str, requester_email: str, direction: Direction
    ) -> Result[TripErrorCode, bool]: ...

    def search_trips(
        self, criteria: SearchCriteria, direction: Direction
    ) -> Result[TripErrorCode, list[Trip]]: ...


class UserStore(Protocol):
    backend: str

    def add_owned_trip(self, email: str, trip_id: str, direction: Direction) -> Result[TripErrorCode, bool]: ...

    def add_member_trip(self, email: str, trip_id: str, direction: Direction) -> Result[TripErrorCode, bool]: ...

    def get_user(self, email: str) -> User | None: ...


class SubscriptionStore(Protocol):
    backend: str

    def add_subscription(self, subscription: Subscription) -> Result[TripErrorCode, Subscription]: ...

    def find_subscribers(
        self, criteria: SearchCriteria, direction: Direction
    ) -> Result[TripErrorCode, list[str]]: ...


class ReconciliationLog(Protocol):
    backend: str

    def record_orphan(
        self,
        kind: OrphanKind,
        direction: Direction,
        trip_id: str,
        email: str,
        reason: str = "",
    ) -> OrphanRecord | None: ...

    def get_orphan(self, orphan_id: int) -> OrphanRecord | None: ...

    def list_orphans(self, include_resolved: bool = False) -> list[OrphanRecord]: ...

    def mark_resolved(self, orphan_id: int) -> bool: ...

    def unresolved_count(self) -> int: ...


@dataclass
class StoreBundle:
    trip_store: TripStore
    user_store: UserStore
    subscription_store: SubscriptionStore
    reconciliation_log: ReconciliationLog


def build_memory_stores() -> StoreBundle:
    return StoreBundle(
        trip_store=InMemoryTripStore(),
        user_store=InMemoryUserStore(),
        subscription_store=InMemorySubscriptionStore(),
        reconciliation_log=InMemoryReconciliationLog(),
    )


def build_sqlite_stores(db_path) -> StoreBundle:
    db = SQLiteDatabase(db_path)
    return StoreBundle(
        trip_store=SQLiteTripStore(db),
        user_store=SQLiteUserStore(db),
        subscription_store=SQLiteSubscriptionStore(db),
        reconciliation_log=SQLiteReconciliationLog(db),
    )


def build_stores(settings: GetBackSettings) -> StoreBundle:
    if settings.store_backend == "memory":
        return build_memory_stores()
    return build_sqlite_stores(settings.db_path)


__all__ = [
    "ReconciliationLog",
    "StoreBundle",
    "SubscriptionStore",
    "TripStore",
    "UserStore",
    "build_memory_stores",
    "build_sqlite_stores",
    "build_stores",
]
