"""Persistence package exports."""

from getback.persistence.memory_repository import (
    InMemoryReconciliationLog,
    InMemorySubscriptionStore,
    InMemoryTripStore,
    InMemoryUserStore,
)
from getback.persistence.models import OrphanRecord
from getback.persistence.repository import (
    ReconciliationLog,
    StoreBundle,
    SubscriptionStore,
    TripStore,
    UserStore,
    build_memory_stores,
    build_sqlite_stores,
    build_stores,
)
from getback.persistence.sqlite_repository import (
    SQLiteDatabase,
    SQLiteReconciliationLog,
    SQLiteSubscriptionStore,
    SQLiteTripStore,
    SQLiteUserStore,
)

__all__ = [
    "InMemoryReconciliationLog",
    "InMemorySubscriptionStore",
    "InMemoryTripStore",
    "InMemoryUserStore",
    "OrphanRecord",
    "ReconciliationLog",
    "SQLiteDatabase",
    "SQLiteReconciliationLog",
    "SQLiteSubscriptionStore",
    "SQLiteTripStore",
    "SQLiteUserStore",
    "StoreBundle",
    "SubscriptionStore",
    "TripStore",
    "UserStore",
    "build_memory_stores",
    "build_sqlite_stores",
    "build_stores",
]
