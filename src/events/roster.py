"""Roster transitions.

Each function takes the current event and returns the event as it should be
persisted, or raises an EventsError. Inputs are never mutated, so a failed
transition leaves nothing half-applied.
"""

from dataclasses import replace
from datetime import datetime

from src.events import visibility
from src.events.dtos import CancelledEntry, Event, EventDateRef, RosterEntry
from src.events.errors import (
    AlreadySignedUpError,
    CapacityExceededError,
    ForbiddenError,
    GuestsNotAllowedError,
    InvalidInputError,
    NotFoundError,
    SignupClosedError,
)
from src.identity.dtos import Actor


def _ensure_signup_open(event: Event, now: datetime) -> None:
    if now > event.max_signup_date:
        raise SignupClosedError(
            f"Sign-up for '{event.name}' closed on {event.max_signup_date.isoformat()}"
        )


def _ensure_self(actor: Actor, user_id: str) -> None:
    if actor.identity != user_id:
        raise ForbiddenError("You can only change your own sign-up")


def sign_up(
    event: Event,
    ref: EventDateRef,
    *,
    user_id: str,
    username: str,
    costume: str,
    now: datetime,
    avatar: str | None = None,
    groups: frozenset[str] | None = None,
) -> Event:
    """Append ``user_id`` to the roster of the referenced date.

    With ``groups`` the caller must belong to one of the groups the event
    is visible to. Organizer tooling passes None to skip that check.
    """
    if groups is not None and not visibility.is_visible_to(event, groups):
        raise ForbiddenError(f"'{event.name}' is not open to your groups")
    index, event_date = event.locate_date(ref)
    _ensure_signup_open(event, now)
    if event_date.find_entry(user_id) is not None:
        raise AlreadySignedUpError(user_id)
    if event_date.is_full:
        raise CapacityExceededError(event_date.available_spots)

    entry = RosterEntry(
        user_id=user_id,
        username=username,
        sign_up_date=now,
        costume=costume,
        avatar=avatar,
    )
    return event.with_date(
        index, replace(event_date, signed_up_users=event_date.signed_up_users + (entry,))
    )


def add_guest(
    event: Event,
    ref: EventDateRef,
    *,
    guest_name: str,
    actor: Actor,
    now: datetime,
) -> Event:
    index, event_date = event.locate_date(ref)
    if not event.can_register_guests:
        raise GuestsNotAllowedError(f"'{event.name}' does not accept guests")
    _ensure_signup_open(event, now)

    name = guest_name.strip()
    if not name:
        raise InvalidInputError("A guest needs a name")
    return event.with_date(index, replace(event_date, guests=event_date.guests + (name,)))


def sign_out(
    event: Event,
    ref: EventDateRef,
    *,
    user_id: str,
    reason: str,
    actor: Actor,
) -> Event:
    _ensure_self(actor, user_id)
    if not reason.strip():
        raise InvalidInputError("A reason is required to sign out")
    index, event_date = event.locate_date(ref)
    entry = event_date.find_entry(user_id)
    if entry is None:
        raise NotFoundError(f"User '{user_id}' is not signed up for this date")

    return event.with_date(
        index,
        replace(
            event_date,
            signed_up_users=tuple(e for e in event_date.signed_up_users if e is not entry),
            cancelled_users=event_date.cancelled_users
            + (CancelledEntry.from_roster_entry(entry, reason),),
        ),
    )


def change_costume(
    event: Event,
    ref: EventDateRef,
    *,
    user_id: str,
    costume: str,
    actor: Actor,
    avatar: str | None = None,
) -> Event:
    _ensure_self(actor, user_id)
    index, event_date = event.locate_date(ref)
    entry = event_date.find_entry(user_id)
    if entry is None:
        raise NotFoundError(f"User '{user_id}' is not signed up for this date")

    changed = replace(entry, costume=costume, avatar=avatar or entry.avatar)
    return event.with_date(
        index,
        replace(
            event_date,
            signed_up_users=tuple(
                changed if e is entry else e for e in event_date.signed_up_users
            ),
        ),
    )
