"""Pydantic domain models."""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field, model_validator

from getback.domain.enums import Direction, TripRelation

# seats a single shuttle trip can offer besides the owner
MAX_OTHER_MEMBERS_LIMIT = 50


class TripDraft(BaseModel):
    """Trip fields that passed the validation gate (strings already escaped)."""

    max_other_members: int = Field(ge=0, le=MAX_OTHER_MEMBERS_LIMIT)
    trip_date: dt.date
    trip_hour: int = Field(ge=0, le=23)
    trip_quarter_hour: int = Field(ge=0, le=45)
    trip_name: str = Field(min_length=1)
    college: str = Field(min_length=1)
    airport: str = Field(min_length=1)


class CreateTripQuery(TripDraft):
    owner_email: str = Field(min_length=1)


class Trip(BaseModel):
    trip_id: str
    owner_email: str
    max_other_members: int = Field(ge=0, le=MAX_OTHER_MEMBERS_LIMIT)
    trip_date: dt.date
    trip_hour: int = Field(ge=0, le=23)
    trip_quarter_hour: int = Field(ge=0, le=45)
    trip_name: str
    college: str
    airport: str
    member_emails: list[str] = Field(default_factory=list)
    created_at: str = ""

    @model_validator(mode="after")
    def _check_capacity(self) -> "Trip":
        if len(self.member_emails) > self.max_other_members:
            raise ValueError(
                f"trip {self.trip_id} holds {len(self.member_emails)} members, "
                f"capacity is {self.max_other_members}"
            )
        if self.owner_email in self.member_emails:
            raise ValueError(f"trip {self.trip_id} lists its owner as a member")
        return self

    @property
    def seats_left(self) -> int:
        return self.max_other_members - len(self.member_emails)

    @property
    def is_full(self) -> bool:
        return self.seats_left <= 0

    def origin(self, direction: Direction) -> str:
        return self.college if direction == Direction.FROM_CAMPUS else self.airport

    def destination(self, direction: Direction) -> str:
        return self.airport if direction == Direction.FROM_CAMPUS else self.college


class SearchCriteria(BaseModel):
    trip_date: dt.date
    trip_hour: int = Field(ge=0, le=23)
    college: str = Field(min_length=1)
    airport: str = Field(min_length=1)


class User(BaseModel):
    email: str
    owned_trips_from_campus: list[str] = Field(default_factory=list)
    owned_trips_from_airport: list[str] = Field(default_factory=list)
    member_trips_from_campus: list[str] = Field(default_factory=list)
    member_trips_from_airport: list[str] = Field(default_factory=list)

    def trips_for(self, relation: TripRelation, direction: Direction) -> list[str]:
        return getattr(self, user_list_name(relation, direction))


def user_list_name(relation: TripRelation, direction: Direction) -> str:
    suffix = "from_campus" if direction == Direction.FROM_CAMPUS else "from_airport"
    return f"{relation.value}_trips_{suffix}"


class Subscription(BaseModel):
    email: str
    direction: Direction
    trip_date: dt.date
    trip_hour: int = Field(ge=0, le=23)
    trip_quarter_hour: int = Field(default=0, ge=0, le=45)
    college: str = Field(min_length=1)
    airport: str = Field(min_length=1)
