"""API request/response models."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TRIP_ID_PATTERN = r"^[0-9a-f]{32}$"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class JoinTripRequest(_CamelModel):
    trip_id: str = Field(min_length=1, max_length=64, description="ID of the trip to join")


class TripResponse(_CamelModel):
    trip_id: str
    owner_email: str
    max_other_members: int
    trip_date: dt.date
    trip_hour: int
    trip_quarter_hour: int
    trip_name: str
    college: str
    airport: str
    member_emails: list[str] = Field(default_factory=list)
    seats_left: int = 0
    created_at: str = ""


class UserTripsResponse(_CamelModel):
    email: str
    owned_trips_from_campus: list[str] = Field(default_factory=list)
    owned_trips_from_airport: list[str] = Field(default_factory=list)
    member_trips_from_campus: list[str] = Field(default_factory=list)
    member_trips_from_airport: list[str] = Field(default_factory=list)


class SubscriptionResponse(_CamelModel):
    email: str
    direction: str
    trip_date: dt.date
    trip_hour: int
    trip_quarter_hour: int
    college: str
    airport: str


class SuccessResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    status: str = "ok"
