"""Write model for creating, updating, archiving and deleting events."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import replace
from uuid import UUID

from src.config.settings import settings
from src.events.concurrency import EventUpdater, bounded
from src.events.dtos import Event, EventDate
from src.events.errors import ConflictError, InvalidInputError, NotFoundError
from src.events.features.manage_events.dtos import EventDateInput, EventPayload
from src.events.repository.event_store import EventStore


def reschedule(
    current: Sequence[EventDate], schedule: Sequence[EventDateInput]
) -> tuple[EventDate, ...]:
    """Apply a new schedule while keeping the rosters of dates that stay.

    A date that already has participants may not be dropped.
    """
    existing = {event_date.id: event_date for event_date in current}
    kept: set[UUID] = set()
    dates = []
    for item in schedule:
        if item.event_date_id is None:
            dates.append(
                EventDate(date=item.date, available_spots=item.available_spots, open=item.open)
            )
            continue
        if item.event_date_id in kept:
            raise InvalidInputError(f"Event date {item.event_date_id} is listed twice")
        previous = existing.get(item.event_date_id)
        if previous is None:
            raise NotFoundError(f"Event date {item.event_date_id} not found")
        kept.add(item.event_date_id)
        dates.append(
            replace(previous, date=item.date, available_spots=item.available_spots, open=item.open)
        )

    for event_date in current:
        if event_date.id not in kept and event_date.has_participants:
            raise ConflictError(
                f"Event date {event_date.id} has sign-ups and cannot be removed"
            )
    return tuple(dates)


class EventWriteModel(ABC):
    @abstractmethod
    async def create_event(self, payload: EventPayload) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def update_event(
        self, event_id: UUID, payload: EventPayload, expected_version: int | None = None
    ) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def archive_event(self, event_id: UUID) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def delete_event(self, event_id: UUID) -> None:
        raise NotImplementedError


class StoreEventWriteModel(EventWriteModel):
    def __init__(self, event_store: EventStore, updater: EventUpdater | None = None) -> None:
        self._event_store = event_store
        self._updater = updater or EventUpdater(event_store)

    async def create_event(self, payload: EventPayload) -> Event:
        event = Event(
            **payload.details(),
            event_dates=reschedule((), payload.event_dates),
        )
        return await bounded(
            self._event_store.add(event), settings.STORE_TIMEOUT_SECONDS, "Creating event"
        )

    async def update_event(
        self, event_id: UUID, payload: EventPayload, expected_version: int | None = None
    ) -> Event:
        def transition(event: Event) -> Event:
            return replace(
                event,
                **payload.details(),
                event_dates=reschedule(event.event_dates, payload.event_dates),
            )

        return await self._updater.apply(
            event_id, transition, "Event update", expected_version=expected_version
        )

    async def archive_event(self, event_id: UUID) -> Event:
        return await self._updater.apply(
            event_id, lambda event: replace(event, is_archived=True), "Archiving"
        )

    async def delete_event(self, event_id: UUID) -> None:
        await bounded(
            self._event_store.delete(event_id), settings.STORE_TIMEOUT_SECONDS, "Deleting event"
        )
