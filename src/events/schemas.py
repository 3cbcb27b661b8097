"""Response bodies for events, built straight from the event DTOs."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.events.dtos import Event


class RosterEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    sign_up_date: datetime
    costume: str
    avatar: str | None = None


class CancelledEntryResponse(RosterEntryResponse):
    signout_reason: str


class EventDateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    date: datetime
    available_spots: int | None = None
    signed_up_users: list[RosterEntryResponse]
    cancelled_users: list[CancelledEntryResponse]
    guests: list[str]
    open: bool


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    version: int
    name: str
    description: str
    group_visibility: list[str]
    event_dates: list[EventDateResponse]
    max_signup_date: datetime
    gather_time: str
    start_time: str
    end_time: str
    event_coordinator: str | None = None
    street: str | None = None
    house_number: str | None = None
    postcode: str | None = None
    city: str
    forum_url: str | None = None
    facebook_event: str | None = None
    website_url: str | None = None
    publicly_accessible: bool
    dressingroom_available: bool
    travel_restitution: bool
    parking: bool
    parking_restitution: bool
    lunch: bool
    drinks: bool
    can_register_guests: bool
    blasters_allowed: bool
    is_archived: bool

    @classmethod
    def from_event(cls, event: Event) -> "EventResponse":
        response = cls.model_validate(event)
        response.group_visibility = sorted(event.group_visibility)
        return response


class PublicRosterEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    costume: str
    avatar: str | None = None


class PublicEventDateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    date: datetime
    available_spots: int | None = None
    signed_up_users: list[PublicRosterEntryResponse]
    open: bool


class PublicEventResponse(BaseModel):
    """An event as shown to callers without a token: no user ids."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    event_dates: list[PublicEventDateResponse]
    gather_time: str
    start_time: str
    end_time: str
    city: str
    street: str | None = None
    house_number: str | None = None
    postcode: str | None = None
    website_url: str | None = None
    facebook_event: str | None = None
