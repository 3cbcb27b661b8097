"""Value types for events, their scheduled dates and rosters.

All types are frozen: roster transitions build new instances instead of
mutating the ones read from the store.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from uuid import UUID, uuid4

from src.events.errors import NotFoundError


@dataclass(frozen=True)
class RosterEntry:
    """One user's active participation in one event date."""

    user_id: str
    username: str
    sign_up_date: datetime
    costume: str
    avatar: str | None = None


@dataclass(frozen=True)
class CancelledEntry:
    """A roster entry that was moved out of the active roster."""

    user_id: str
    username: str
    sign_up_date: datetime
    costume: str
    signout_reason: str
    avatar: str | None = None

    @classmethod
    def from_roster_entry(cls, entry: RosterEntry, reason: str) -> "CancelledEntry":
        return cls(
            user_id=entry.user_id,
            username=entry.username,
            sign_up_date=entry.sign_up_date,
            costume=entry.costume,
            signout_reason=reason,
            avatar=entry.avatar,
        )


@dataclass(frozen=True)
class EventDate:
    """One scheduled occurrence of an event, with its own capacity and roster."""

    date: datetime
    id: UUID = field(default_factory=uuid4)
    available_spots: int | None = None
    signed_up_users: tuple[RosterEntry, ...] = ()
    cancelled_users: tuple[CancelledEntry, ...] = ()
    guests: tuple[str, ...] = ()
    open: bool = True

    def find_entry(self, user_id: str) -> RosterEntry | None:
        for entry in self.signed_up_users:
            if entry.user_id == user_id:
                return entry
        return None

    @property
    def is_full(self) -> bool:
        if self.available_spots is None:
            return False
        return len(self.signed_up_users) >= self.available_spots

    @property
    def has_participants(self) -> bool:
        return bool(self.signed_up_users or self.cancelled_users or self.guests)


@dataclass(frozen=True)
class EventDateRef:
    """Addresses an event date by stable id, or by legacy position."""

    event_date_id: UUID | None = None
    event_date_index: int | None = None


@dataclass(frozen=True)
class Event:
    name: str
    city: str
    max_signup_date: datetime
    event_dates: tuple[EventDate, ...]
    id: UUID = field(default_factory=uuid4)
    version: int = 1
    description: str = ""
    group_visibility: frozenset[str] = frozenset()

    # Logistics
    gather_time: str = ""
    start_time: str = ""
    end_time: str = ""
    event_coordinator: str | None = None
    street: str | None = None
    house_number: str | None = None
    postcode: str | None = None
    forum_url: str | None = None
    facebook_event: str | None = None
    website_url: str | None = None

    # Amenities and policy flags
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

    def locate_date(self, ref: EventDateRef) -> tuple[int, EventDate]:
        """Return the position and value of the referenced event date.

        Raises NotFoundError when the reference matches nothing.
        """
        if ref.event_date_id is not None:
            for index, event_date in enumerate(self.event_dates):
                if event_date.id == ref.event_date_id:
                    return index, event_date
            raise NotFoundError(f"Event date {ref.event_date_id} not found in event {self.id}")
        if ref.event_date_index is not None:
            if 0 <= ref.event_date_index < len(self.event_dates):
                return ref.event_date_index, self.event_dates[ref.event_date_index]
            raise NotFoundError(
                f"Event {self.id} has no event date at index {ref.event_date_index}"
            )
        raise NotFoundError("No event date given")

    def with_date(self, index: int, event_date: EventDate) -> "Event":
        dates = list(self.event_dates)
        dates[index] = event_date
        return replace(self, event_dates=tuple(dates))

    @property
    def first_date(self) -> datetime:
        return min(event_date.date for event_date in self.event_dates)

