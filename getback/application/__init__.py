"""Application use-cases: membership, search and notifications."""

from getback.application.context import AppContext, make_app_context
from getback.application.contracts import MembershipFailure
from getback.application.membership import create_trip, delete_trip, join_trip
from getback.application.notifications import notify_subscribers, subscribe
from getback.application.reconciliation import resolve_orphan
from getback.application.search import search_trips

__all__ = [
    "AppContext",
    "MembershipFailure",
    "create_trip",
    "delete_trip",
    "join_trip",
    "make_app_context",
    "notify_subscribers",
    "resolve_orphan",
    "search_trips",
    "subscribe",
]
