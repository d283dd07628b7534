"""Trip search: exact-match filtering, self-exclusion and fail-open."""

from __future__ import annotations

import json

from getback.application.membership import create_trip
from getback.application.search import search_trips
from getback.domain.enums import Direction, TripErrorCode
from getback.domain.validation import build_search_criteria
from getback.shared.result import Left


class _BrokenTripStore:
    backend = "broken"

    def search_trips(self, criteria, direction):
        return Left(TripErrorCode.DATABASE_ERROR)


def _criteria(**overrides):
    raw = {"tripDate": "2026-11-25", "tripHour": 14, "college": "Harvard University", "airport": "BOS"}
    raw.update(overrides)
    return build_search_criteria(raw)


def test_search_excludes_requesters_own_trips(ctx, trip_payload):
    mine = create_trip(ctx, "me@harvard.edu", trip_payload(), Direction.FROM_CAMPUS).value
    theirs = create_trip(ctx, "them@harvard.edu", trip_payload(), Direction.FROM_CAMPUS).value

    found = search_trips(ctx, "me@harvard.edu", _criteria(), Direction.FROM_CAMPUS)

    assert [trip.trip_id for trip in found] == [theirs.trip_id]
    assert mine.trip_id not in {trip.trip_id for trip in found}


def test_search_is_scoped_to_direction_and_hour(ctx, trip_payload):
    create_trip(ctx, "them@harvard.edu", trip_payload(tripHour=0), Direction.FROM_AIRPORT)

    assert search_trips(ctx, "me@harvard.edu", _criteria(tripHour=0), Direction.FROM_CAMPUS) == []
    assert len(search_trips(ctx, "me@harvard.edu", _criteria(tripHour=0), Direction.FROM_AIRPORT)) == 1


def test_search_fails_open_on_store_error(memory_ctx, log_stream):
    memory_ctx.trip_store = _BrokenTripStore()

    assert search_trips(memory_ctx, "me@harvard.edu", _criteria(), Direction.FROM_CAMPUS) == []
    events = [json.loads(line)["event"] for line in log_stream.getvalue().splitlines()]
    assert events == ["search_failed"]
