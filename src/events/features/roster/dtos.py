"""Request bodies for roster operations."""

from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from src.events.dtos import EventDateRef


class EventDateRequest(BaseModel):
    """Addresses one date of one event.

    ``event_date_id`` is preferred; ``event_date_index`` is accepted for
    clients that still address dates by position.
    """

    event_id: UUID
    event_date_id: UUID | None = None
    event_date_index: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_date_reference(self) -> "EventDateRequest":
        if self.event_date_id is None and self.event_date_index is None:
            raise ValueError("Either event_date_id or event_date_index is required")
        return self

    @property
    def date_ref(self) -> EventDateRef:
        return EventDateRef(
            event_date_id=self.event_date_id,
            event_date_index=self.event_date_index,
        )


class SignUpRequest(EventDateRequest):
    username: str = Field(min_length=1)
    costume: str = Field(min_length=1)
    avatar: str | None = None


class SignUpGuestRequest(EventDateRequest):
    guest_name: str = Field(min_length=1)


class SignOutRequest(EventDateRequest):
    user_id: str
    signout_reason: str = Field(min_length=1)


class ChangeCostumeRequest(EventDateRequest):
    user_id: str
    costume: str = Field(min_length=1)
    avatar: str | None = None
