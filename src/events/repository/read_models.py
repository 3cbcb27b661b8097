import abc
from datetime import datetime
from uuid import UUID

from src.config.settings import settings
from src.events import visibility
from src.events.concurrency import bounded
from src.events.dtos import Event
from src.events.errors import NotFoundError
from src.events.repository.event_store import EventPredicate, EventStore


class EventReadModel(abc.ABC):
    @abc.abstractmethod
    async def get_event(self, event_id: UUID) -> Event:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_public_event(self, event_id: UUID) -> Event:
        """Get an event that is publicly accessible, for callers without a token."""
        raise NotImplementedError

    @abc.abstractmethod
    async def list_active(self, groups: frozenset[str], as_of: datetime) -> list[Event]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_archived(self, groups: frozenset[str], as_of: datetime) -> list[Event]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_signed_up(self, user_id: str, as_of: datetime) -> list[Event]:
        raise NotImplementedError


class StoreEventReadModel(EventReadModel):
    """Read model evaluating the visibility rules over the event store."""

    def __init__(
        self, event_store: EventStore, timeout: float = settings.STORE_TIMEOUT_SECONDS
    ) -> None:
        self._event_store = event_store
        self._timeout = timeout

    async def _query(self, predicate: EventPredicate, operation: str) -> list[Event]:
        return await bounded(self._event_store.query(predicate), self._timeout, operation)

    async def get_event(self, event_id: UUID) -> Event:
        return await bounded(
            self._event_store.get(event_id), self._timeout, f"Loading event {event_id}"
        )

    async def get_public_event(self, event_id: UUID) -> Event:
        event = await self.get_event(event_id)
        if not event.publicly_accessible:
            # indistinguishable from a missing event
            raise NotFoundError(f"Event {event_id} not found")
        return event

    async def list_active(self, groups: frozenset[str], as_of: datetime) -> list[Event]:
        events = await self._query(
            lambda event: visibility.is_active(event, groups, as_of), "Listing active events"
        )
        return sorted(events, key=lambda event: event.first_date)

    async def list_archived(self, groups: frozenset[str], as_of: datetime) -> list[Event]:
        events = await self._query(
            lambda event: visibility.is_archived(event, groups, as_of), "Listing archived events"
        )
        return sorted(events, key=lambda event: event.first_date, reverse=True)

    async def list_signed_up(self, user_id: str, as_of: datetime) -> list[Event]:
        events = await self._query(
            lambda event: visibility.is_signed_up(event, user_id, as_of),
            f"Listing events of {user_id}",
        )
        return sorted(events, key=lambda event: event.first_date)
