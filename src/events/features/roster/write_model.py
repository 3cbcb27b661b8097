"""Write model for roster operations.

Every operation is one transition applied through the EventUpdater, so
each either commits completely against the latest version of the event or
leaves it untouched.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime
from functools import partial
from uuid import UUID

from src.events import roster
from src.events.concurrency import EventUpdater
from src.events.dtos import Event, EventDateRef
from src.events.repository.event_store import EventStore
from src.identity.dtos import Actor


def utc_now() -> datetime:
    return datetime.now(UTC)


class RosterWriteModel(ABC):
    """Abstract base class for roster write operations."""

    @abstractmethod
    async def sign_up(
        self,
        event_id: UUID,
        ref: EventDateRef,
        user_id: str,
        username: str,
        costume: str,
        avatar: str | None = None,
        groups: frozenset[str] | None = None,
    ) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def add_guest(
        self, event_id: UUID, ref: EventDateRef, guest_name: str, actor: Actor
    ) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def sign_out(
        self, event_id: UUID, ref: EventDateRef, user_id: str, reason: str, actor: Actor
    ) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def change_costume(
        self,
        event_id: UUID,
        ref: EventDateRef,
        user_id: str,
        costume: str,
        actor: Actor,
        avatar: str | None = None,
    ) -> Event:
        raise NotImplementedError


class StoreRosterWriteModel(RosterWriteModel):
    def __init__(
        self,
        event_store: EventStore,
        updater: EventUpdater | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._updater = updater or EventUpdater(event_store)
        self._clock = clock

    async def sign_up(
        self,
        event_id: UUID,
        ref: EventDateRef,
        user_id: str,
        username: str,
        costume: str,
        avatar: str | None = None,
        groups: frozenset[str] | None = None,
    ) -> Event:
        def transition(event: Event) -> Event:
            return roster.sign_up(
                event,
                ref,
                user_id=user_id,
                username=username,
                costume=costume,
                avatar=avatar,
                now=self._clock(),
                groups=groups,
            )

        return await self._updater.apply(event_id, transition, f"Sign-up of {user_id}")

    async def add_guest(
        self, event_id: UUID, ref: EventDateRef, guest_name: str, actor: Actor
    ) -> Event:
        def transition(event: Event) -> Event:
            return roster.add_guest(
                event, ref, guest_name=guest_name, actor=actor, now=self._clock()
            )

        return await self._updater.apply(
            event_id, transition, f"Guest registration by {actor.identity}"
        )

    async def sign_out(
        self, event_id: UUID, ref: EventDateRef, user_id: str, reason: str, actor: Actor
    ) -> Event:
        transition = partial(roster.sign_out, ref=ref, user_id=user_id, reason=reason, actor=actor)
        return await self._updater.apply(event_id, transition, f"Sign-out of {user_id}")

    async def change_costume(
        self,
        event_id: UUID,
        ref: EventDateRef,
        user_id: str,
        costume: str,
        actor: Actor,
        avatar: str | None = None,
    ) -> Event:
        transition = partial(
            roster.change_costume,
            ref=ref,
            user_id=user_id,
            costume=costume,
            actor=actor,
            avatar=avatar,
        )
        return await self._updater.apply(event_id, transition, f"Costume change of {user_id}")
