"""Serialized read-modify-write of event documents.

Within one process, writers to the same event queue on a per-event lock.
Across processes the store's versioned ``put`` detects lost races and the
transition is re-applied to a fresh read, a bounded number of times.
"""

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar
from uuid import UUID

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from src.config.settings import settings
from src.events.dtos import Event
from src.events.errors import UpstreamUnavailableError, VersionConflictError
from src.events.repository.event_store import EventStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

Transition = Callable[[Event], Event]


class EventLocks:
    """One asyncio lock per event id, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @asynccontextmanager
    async def hold(self, event_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.get(event_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[event_id] = lock
        async with lock:
            yield


event_locks = EventLocks()


async def bounded(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """Await ``awaitable`` but give up after ``timeout`` seconds."""
    try:
        async with asyncio.timeout(timeout):
            return await awaitable
    except TimeoutError as e:
        logger.error(f"{operation} timed out after {timeout}s")
        raise UpstreamUnavailableError(f"{operation} timed out, please retry") from e


class EventUpdater:
    def __init__(
        self,
        event_store: EventStore,
        locks: EventLocks = event_locks,
        max_attempts: int = settings.ROSTER_MAX_ATTEMPTS,
        timeout: float = settings.STORE_TIMEOUT_SECONDS,
    ) -> None:
        self._event_store = event_store
        self._locks = locks
        self._max_attempts = max_attempts
        self._timeout = timeout

    async def apply(
        self,
        event_id: UUID,
        transition: Transition,
        operation: str,
        expected_version: int | None = None,
    ) -> Event:
        """Load the event, apply ``transition`` and store the result atomically.

        Errors raised by ``transition`` propagate untouched and nothing is
        written. With ``expected_version`` the caller pins the version it
        edited; a mismatch is reported at once instead of retried.
        """
        attempts = self._max_attempts if expected_version is None else 1

        def log_lost_race(retry_state: RetryCallState) -> None:
            logger.warning(
                f"{operation} on event {event_id} lost a write race "
                f"(attempt {retry_state.attempt_number}/{attempts})"
            )

        async with self._locks.hold(event_id):
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(VersionConflictError),
                stop=stop_after_attempt(attempts),
                before_sleep=log_lost_race,
                reraise=True,
            ):
                with attempt:
                    stored = await self._read_transition_write(
                        event_id, transition, expected_version
                    )

        logger.info(f"{operation} on event {event_id} stored as version {stored.version}")
        return stored

    async def _read_transition_write(
        self, event_id: UUID, transition: Transition, expected_version: int | None
    ) -> Event:
        event = await bounded(
            self._event_store.get(event_id), self._timeout, f"Loading event {event_id}"
        )
        if expected_version is not None and event.version != expected_version:
            raise VersionConflictError(
                f"Event {event_id} is at version {event.version}, expected {expected_version}"
            )
        return await bounded(
            self._event_store.put(transition(event), expected_version=event.version),
            self._timeout,
            f"Storing event {event_id}",
        )
