"""Trip, user, subscription and reconciliation stores on both backends."""

from __future__ import annotations

import datetime as dt

from getback.domain.enums import Direction, OrphanKind, TripErrorCode, TripRelation
from getback.domain.models import CreateTripQuery, SearchCriteria, Subscription
from getback.shared.result import Left, Right


def _query(owner="owner@harvard.edu", max_other_members=2, **overrides) -> CreateTripQuery:
    fields = {
        "owner_email": owner,
        "max_other_members": max_other_members,
        "trip_date": dt.date(2026, 11, 25),
        "trip_hour": 14,
        "trip_quarter_hour": 30,
        "trip_name": "run",
        "college": "Harvard University",
        "airport": "BOS",
    }
    fields.update(overrides)
    return CreateTripQuery(**fields)


def _criteria(**overrides) -> SearchCriteria:
    fields = {"trip_date": dt.date(2026, 11, 25), "trip_hour": 14, "college": "Harvard University", "airport": "BOS"}
    fields.update(overrides)
    return SearchCriteria(**fields)


def _create(store, direction=Direction.FROM_CAMPUS, **kwargs):
    created = store.create_trip(_query(**kwargs), direction)
    assert isinstance(created, Right)
    return created.value


def test_create_assigns_id_and_empty_member_list(ctx):
    trip = _create(ctx.trip_store)

    assert len(trip.trip_id) == 32
    assert trip.member_emails == []
    assert trip.created_at
    fetched = ctx.trip_store.get_trip(trip.trip_id, Direction.FROM_CAMPUS)
    assert fetched == Right(trip)


def test_directions_are_separate_collections(ctx):
    trip = _create(ctx.trip_store, Direction.FROM_AIRPORT)

    assert ctx.trip_store.get_trip(trip.trip_id, Direction.FROM_CAMPUS) == Left(TripErrorCode.NOT_FOUND)
    assert isinstance(ctx.trip_store.get_trip(trip.trip_id, Direction.FROM_AIRPORT), Right)


def test_join_appends_until_capacity(ctx):
    trip = _create(ctx.trip_store, max_other_members=2)
    store = ctx.trip_store

    assert store.add_user_to_trip(trip.trip_id, "a@harvard.edu", Direction.FROM_CAMPUS) == Right(True)
    assert store.add_user_to_trip(trip.trip_id, "b@harvard.edu", Direction.FROM_CAMPUS) == Right(True)
    assert store.add_user_to_trip(trip.trip_id, "c@harvard.edu", Direction.FROM_CAMPUS) == Left(TripErrorCode.TRIP_FULL)

    members = store.get_trip(trip.trip_id, Direction.FROM_CAMPUS).value.member_emails
    assert members == ["a@harvard.edu", "b@harvard.edu"]


def test_join_rejections(ctx):
    trip = _create(ctx.trip_store)
    store = ctx.trip_store
    store.add_user_to_trip(trip.trip_id, "a@harvard.edu", Direction.FROM_CAMPUS)

    assert store.add_user_to_trip("0" * 32, "a@harvard.edu", Direction.FROM_CAMPUS) == Left(TripErrorCode.NOT_FOUND)
    assert store.add_user_to_trip(trip.trip_id, "a@harvard.edu", Direction.FROM_CAMPUS) == Left(
        TripErrorCode.ALREADY_MEMBER
    )
    assert store.add_user_to_trip(trip.trip_id, "owner@harvard.edu", Direction.FROM_CAMPUS) == Left(
        TripErrorCode.ALREADY_MEMBER
    )


def test_zero_capacity_trip_is_full_immediately(ctx):
    trip = _create(ctx.trip_store, max_other_members=0)
    assert ctx.trip_store.add_user_to_trip(trip.trip_id, "a@harvard.edu", Direction.FROM_CAMPUS) == Left(
        TripErrorCode.TRIP_FULL
    )


def test_delete_is_owner_only(ctx):
    trip = _create(ctx.trip_store)
    store = ctx.trip_store

    assert store.delete_trip(trip.trip_id, "someone@harvard.edu", Direction.FROM_CAMPUS) == Right(False)
    assert isinstance(store.get_trip(trip.trip_id, Direction.FROM_CAMPUS), Right)

    assert store.delete_trip(trip.trip_id, "owner@harvard.edu", Direction.FROM_CAMPUS) == Right(True)
    assert store.get_trip(trip.trip_id, Direction.FROM_CAMPUS) == Left(TripErrorCode.NOT_FOUND)
    assert store.delete_trip(trip.trip_id, "owner@harvard.edu", Direction.FROM_CAMPUS) == Right(False)


def test_search_matches_exact_fields_ordered_by_quarter_hour(ctx):
    store = ctx.trip_store
    late = _create(store, trip_quarter_hour=45)
    early = _create(store, trip_quarter_hour=0)
    _create(store, trip_hour=15)
    _create(store, airport="JFK")
    _create(store, trip_date=dt.date(2026, 11, 26))
    _create(store, Direction.FROM_AIRPORT)

    found = store.search_trips(_criteria(), Direction.FROM_CAMPUS)
    assert [trip.trip_id for trip in found.value] == [early.trip_id, late.trip_id]


def test_user_lists_are_per_relation_and_direction(ctx):
    users = ctx.user_store
    assert users.get_user("a@harvard.edu") is None

    users.add_owned_trip("a@harvard.edu", "t1", Direction.FROM_CAMPUS)
    users.add_member_trip("a@harvard.edu", "t2", Direction.FROM_AIRPORT)
    users.add_member_trip("a@harvard.edu", "t2", Direction.FROM_AIRPORT)

    user = users.get_user("a@harvard.edu")
    assert user.trips_for(TripRelation.OWNED, Direction.FROM_CAMPUS) == ["t1"]
    assert user.trips_for(TripRelation.MEMBER, Direction.FROM_AIRPORT) == ["t2"]
    assert user.owned_trips_from_airport == []
    assert user.member_trips_from_campus == []


def test_subscribers_match_route_and_hour(ctx):
    subs = ctx.subscription_store
    base = {
        "direction": Direction.FROM_CAMPUS,
        "trip_date": dt.date(2026, 11, 25),
        "trip_hour": 14,
        "college": "Harvard University",
        "airport": "BOS",
    }
    subs.add_subscription(Subscription(email="b@harvard.edu", **base))
    subs.add_subscription(Subscription(email="a@harvard.edu", **{**base, "trip_quarter_hour": 15}))
    subs.add_subscription(Subscription(email="a@harvard.edu", **base))
    subs.add_subscription(Subscription(email="c@harvard.edu", **{**base, "trip_hour": 9}))
    subs.add_subscription(Subscription(email="d@harvard.edu", **{**base, "direction": Direction.FROM_AIRPORT}))

    found = subs.find_subscribers(_criteria(), Direction.FROM_CAMPUS)
    assert found == Right(["a@harvard.edu", "b@harvard.edu"])


def test_reconciliation_log_lifecycle(ctx):
    log = ctx.reconciliation_log
    record = log.record_orphan(OrphanKind.MEMBER_TRIP, Direction.FROM_CAMPUS, "t1", "a@harvard.edu", "database_error")

    assert record is not None
    assert log.unresolved_count() == 1
    assert log.get_orphan(record.orphan_id).trip_id == "t1"
    assert [r.orphan_id for r in log.list_orphans()] == [record.orphan_id]

    assert log.mark_resolved(record.orphan_id) is True
    assert log.mark_resolved(record.orphan_id) is False
    assert log.unresolved_count() == 0
    assert log.list_orphans() == []
    assert log.list_orphans(include_resolved=True)[0].resolved is True


def test_memory_lock_table_tracks_only_live_trips(memory_ctx):
    store = memory_ctx.trip_store
    for i in range(200):
        unknown = f"{i:032x}"
        assert store.get_trip(unknown, Direction.FROM_CAMPUS) == Left(TripErrorCode.NOT_FOUND)
        assert store.add_user_to_trip(unknown, "a@mit.edu", Direction.FROM_CAMPUS) == Left(TripErrorCode.NOT_FOUND)
        assert store.delete_trip(unknown, "a@mit.edu", Direction.FROM_AIRPORT) == Right(False)
    assert len(store._trip_locks) == 0

    trip = _create(store)
    assert len(store._trip_locks) == 1
    assert store.delete_trip(trip.trip_id, "owner@harvard.edu", Direction.FROM_CAMPUS) == Right(True)
    assert len(store._trip_locks) == 0
    assert store.add_user_to_trip(trip.trip_id, "a@mit.edu", Direction.FROM_CAMPUS) == Left(TripErrorCode.NOT_FOUND)
