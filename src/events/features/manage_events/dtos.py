"""Request bodies for creating and updating events."""

from uuid import UUID

from pydantic import AwareDatetime, BaseModel, Field, field_validator

from src.identity.permissions import MEMBER_GROUPS


class EventDateInput(BaseModel):
    """One scheduled date. Omit ``event_date_id`` to add a new date."""

    event_date_id: UUID | None = None
    date: AwareDatetime
    available_spots: int | None = Field(default=None, ge=0)
    open: bool = True


class EventPayload(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    group_visibility: list[str] = Field(min_length=1)
    event_dates: list[EventDateInput] = Field(min_length=1)
    max_signup_date: AwareDatetime

    gather_time: str
    start_time: str
    end_time: str
    event_coordinator: str | None = None
    street: str | None = None
    house_number: str | None = None
    postcode: str | None = None
    city: str = Field(min_length=1)
    forum_url: str | None = None
    facebook_event: str | None = None
    website_url: str | None = None

    publicly_accessible: bool = False
    dressingroom_available: bool = False
    travel_restitution: bool = False
    parking: bool = False
    parking_restitution: bool = False
    lunch: bool = False
    drinks: bool = False
    can_register_guests: bool = False
    blasters_allowed: bool = False
    is_archived: bool = False

    @field_validator("group_visibility")
    @classmethod
    def check_known_groups(cls, groups: list[str]) -> list[str]:
        unknown = sorted(set(groups) - MEMBER_GROUPS.keys())
        if unknown:
            raise ValueError(f"Unknown member groups: {', '.join(unknown)}")
        return groups

    def details(self) -> dict:
        """Event fields other than the schedule, ready for the Event DTO."""
        details = self.model_dump(exclude={"event_dates", "expected_version"})
        details["group_visibility"] = frozenset(self.group_visibility)
        return details


class EventUpdatePayload(EventPayload):
    # the version the client edited; omit to update whatever is current
    expected_version: int | None = None
