"""Durable storage for event documents with optimistic versioning.

``put`` is a compare-and-swap on the whole document: it only succeeds when
the stored version still equals the version the caller read.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import replace
from functools import partial
from uuid import UUID

from pydantic import TypeAdapter
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.events.dtos import Event
from src.events.errors import NotFoundError, UpstreamUnavailableError, VersionConflictError
from src.events.repository.orm_models import EventRow

logger = logging.getLogger(__name__)

event_document = TypeAdapter(Event)

EventPredicate = Callable[[Event], bool]


def event_to_document(event: Event) -> dict:
    document = event_document.dump_python(event, mode="json")
    # the row owns id and version
    document.pop("id")
    document.pop("version")
    return document


def event_from_row(row: EventRow) -> Event:
    return event_document.validate_python({**row.document, "id": row.uuid, "version": row.version})


class EventStore(ABC):
    @abstractmethod
    async def get(self, event_id: UUID) -> Event:
        """Raises NotFoundError when no event has this id."""
        raise NotImplementedError

    @abstractmethod
    async def query(self, predicate: EventPredicate | None = None) -> list[Event]:
        raise NotImplementedError

    @abstractmethod
    async def add(self, event: Event) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def put(self, event: Event, expected_version: int) -> Event:
        """Replace the stored event if its version is still ``expected_version``.

        Returns the event with its new version. Raises VersionConflictError
        when the stored version moved on and NotFoundError when it is gone.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete(self, event_id: UUID) -> None:
        raise NotImplementedError


class SqlEventStore(EventStore):
    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self._session_overwrite = session_overwrite

    async def get(self, event_id: UUID) -> Event:
        try:
            async with self.async_session_manager(
                session_overwrite=self._session_overwrite
            ) as session:
                row = await session.get(EventRow, event_id, populate_existing=True)
                if row is None:
                    raise NotFoundError(f"Event {event_id} not found")
                return event_from_row(row)
        except SQLAlchemyError as e:
            raise self._unavailable("get", e) from e

    async def query(self, predicate: EventPredicate | None = None) -> list[Event]:
        try:
            async with self.async_session_manager(
                session_overwrite=self._session_overwrite
            ) as session:
                result = await session.execute(
                    select(EventRow)
                    .order_by(EventRow.created_at, EventRow.name)
                    .execution_options(populate_existing=True)
                )
                events = [event_from_row(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._unavailable("query", e) from e
        if predicate is None:
            return events
        return [event for event in events if predicate(event)]

    async def add(self, event: Event) -> Event:
        created = replace(event, version=1)
        try:
            async with self.async_session_manager(
                session_overwrite=self._session_overwrite
            ) as session:
                session.add(
                    EventRow(
                        uuid=created.id,
                        name=created.name,
                        is_archived=created.is_archived,
                        version=created.version,
                        document=event_to_document(created),
                    )
                )
                await session.flush()
        except SQLAlchemyError as e:
            raise self._unavailable("add", e) from e
        logger.info(f"Created event {created.id} ({created.name})")
        return created

    async def put(self, event: Event, expected_version: int) -> Event:
        stored = replace(event, version=expected_version + 1)
        try:
            async with self.async_session_manager(
                session_overwrite=self._session_overwrite
            ) as session:
                result = await session.execute(
                    update(EventRow)
                    .where(EventRow.uuid == event.id, EventRow.version == expected_version)
                    .values(
                        name=stored.name,
                        is_archived=stored.is_archived,
                        version=stored.version,
                        document=event_to_document(stored),
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    current = await session.scalar(
                        select(EventRow.version).where(EventRow.uuid == event.id)
                    )
                    if current is None:
                        raise NotFoundError(f"Event {event.id} not found")
                    raise VersionConflictError(
                        f"Event {event.id} is at version {current}, expected {expected_version}"
                    )
        except SQLAlchemyError as e:
            raise self._unavailable("put", e) from e
        return stored

    async def delete(self, event_id: UUID) -> None:
        try:
            async with self.async_session_manager(
                session_overwrite=self._session_overwrite
            ) as session:
                result = await session.execute(delete(EventRow).where(EventRow.uuid == event_id))
                if result.rowcount == 0:
                    raise NotFoundError(f"Event {event_id} not found")
        except SQLAlchemyError as e:
            raise self._unavailable("delete", e) from e
        logger.info(f"Deleted event {event_id}")

    @staticmethod
    def _unavailable(operation: str, error: SQLAlchemyError) -> UpstreamUnavailableError:
        logger.error(f"Event store {operation} failed: {error}")
        return UpstreamUnavailableError("Event store unavailable")
