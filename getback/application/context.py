"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass, field

from getback.config.settings import GetBackSettings, resolve_settings
from getback.infrastructure.emailer import DisabledEmailer, Emailer, get_emailer
from getback.infrastructure.logging import StructuredLogger, get_logger
from getback.infrastructure.reference_data import ReferenceData, load_reference_data
from getback.persistence.repository import (
    ReconciliationLog,
    SubscriptionStore,
    TripStore,
    UserStore,
    build_stores,
)


@dataclass
class AppContext:
    trip_store: TripStore
    user_store: UserStore
    subscription_store: SubscriptionStore
    reconciliation_log: ReconciliationLog
    reference: ReferenceData
    emailer: Emailer = field(default_factory=DisabledEmailer)
    logger: StructuredLogger = field(default_factory=lambda: get_logger("trips"))
    settings: GetBackSettings = field(default_factory=GetBackSettings)


def make_app_context(settings: GetBackSettings | None = None) -> AppContext:
    resolved = settings or resolve_settings()
    stores = build_stores(resolved)
    return AppContext(
        trip_store=stores.trip_store,
        user_store=stores.user_store,
        subscription_store=stores.subscription_store,
        reconciliation_log=stores.reconciliation_log,
        reference=load_reference_data(resolved.destinations_file),
        emailer=get_emailer(resolved),
        logger=get_logger("trips"),
        settings=resolved,
    )


__all__ = ["AppContext", "make_app_context"]
