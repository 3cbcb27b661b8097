import asyncio
import logging
from dataclasses import replace

import pytest

from src.events import roster
from src.events.concurrency import EventLocks, EventUpdater, bounded
from src.events.dtos import EventDateRef
from src.events.errors import (
    CapacityExceededError,
    UpstreamUnavailableError,
    VersionConflictError,
)
from src.events.repository.tests.inmemory_event_store import (
    InMemoryEventStore,
    SlowEventStore,
    StalledPutEventStore,
)
from src.events.repository.read_models import StoreEventReadModel
from src.events.tests.factories import NOW, make_event

FIRST = EventDateRef(event_date_index=0)


class ContendedEventStore(InMemoryEventStore):
    """Somebody else always writes between our read and our write."""

    async def put(self, event, expected_version):
        current = self.stored(event.id)
        self._events[event.id] = replace(current, version=current.version + 1)
        return await super().put(event, expected_version)


def sign_up_transition(user_id):
    def transition(event):
        return roster.sign_up(
            event, FIRST, user_id=user_id, username=user_id, costume="TK", now=NOW
        )

    return transition


async def test_apply_stores_next_version():
    event = make_event()
    store = InMemoryEventStore([event])
    updater = EventUpdater(store, locks=EventLocks())

    stored = await updater.apply(event.id, sign_up_transition("u1"), "Sign-up")

    assert stored.version == 2
    assert store.stored(event.id).version == 2
    assert store.stored(event.id).event_dates[0].signed_up_users[0].user_id == "u1"


async def test_failed_transition_writes_nothing():
    event = make_event(available_spots=0)
    store = InMemoryEventStore([event])
    updater = EventUpdater(store, locks=EventLocks())

    with pytest.raises(CapacityExceededError):
        await updater.apply(event.id, sign_up_transition("u1"), "Sign-up")

    assert store.put_calls == 0
    assert store.stored(event.id) == event


async def test_concurrent_sign_ups_share_the_lock():
    event = make_event(available_spots=1)
    store = InMemoryEventStore([event])
    locks = EventLocks()

    results = await asyncio.gather(
        *(
            EventUpdater(store, locks=locks).apply(
                event.id, sign_up_transition(user_id), "Sign-up"
            )
            for user_id in ("u1", "u2")
        ),
        return_exceptions=True,
    )

    assert sum(isinstance(result, CapacityExceededError) for result in results) == 1
    assert len(store.stored(event.id).event_dates[0].signed_up_users) == 1
    assert store.conflicts == 0


async def test_concurrent_sign_ups_without_shared_lock_retry_on_conflict():
    event = make_event(available_spots=1)
    store = InMemoryEventStore([event])

    results = await asyncio.gather(
        *(
            EventUpdater(store, locks=EventLocks()).apply(
                event.id, sign_up_transition(user_id), "Sign-up"
            )
            for user_id in ("u1", "u2")
        ),
        return_exceptions=True,
    )

    errors = [result for result in results if isinstance(result, Exception)]
    assert len(errors) == 1
    assert isinstance(errors[0], CapacityExceededError)
    assert store.conflicts >= 1
    stored = store.stored(event.id)
    assert len(stored.event_dates[0].signed_up_users) == 1
    assert stored.version == 2


async def test_many_concurrent_sign_ups_never_overfill():
    event = make_event(available_spots=3)
    store = InMemoryEventStore([event])
    user_ids = [f"u{i}" for i in range(10)]

    results = await asyncio.gather(
        *(
            EventUpdater(store, locks=EventLocks(), max_attempts=20).apply(
                event.id, sign_up_transition(user_id), "Sign-up"
            )
            for user_id in user_ids
        ),
        return_exceptions=True,
    )

    assert sum(not isinstance(result, Exception) for result in results) == 3
    assert all(
        isinstance(result, CapacityExceededError)
        for result in results
        if isinstance(result, Exception)
    )
    assert len(store.stored(event.id).event_dates[0].signed_up_users) == 3


async def test_retries_are_bounded():
    event = make_event()
    store = ContendedEventStore([event])
    updater = EventUpdater(store, locks=EventLocks(), max_attempts=3)

    with pytest.raises(VersionConflictError) as exc_info:
        await updater.apply(event.id, sign_up_transition("u1"), "Sign-up")

    assert store.put_calls == 3
    assert exc_info.value.retryable
    assert store.stored(event.id).event_dates[0].signed_up_users == ()


async def test_pinned_version_mismatch_is_not_retried():
    event = replace(make_event(), version=4)
    store = InMemoryEventStore([event])
    updater = EventUpdater(store, locks=EventLocks())

    with pytest.raises(VersionConflictError):
        await updater.apply(
            event.id, sign_up_transition("u1"), "Update", expected_version=3
        )

    assert store.put_calls == 0


async def test_slow_store_times_out():
    event = make_event()
    store = SlowEventStore([event])
    updater = EventUpdater(store, locks=EventLocks(), timeout=0.01)

    with pytest.raises(UpstreamUnavailableError):
        await updater.apply(event.id, sign_up_transition("u1"), "Sign-up")

    assert store.put_calls == 0


async def test_bounded_returns_result_in_time():
    async def quick():
        return 42

    assert await bounded(quick(), 1.0, "Quick operation") == 42


async def test_lock_is_released_after_error():
    event = make_event(available_spots=0)
    store = InMemoryEventStore([event])
    locks = EventLocks()
    updater = EventUpdater(store, locks=locks)

    with pytest.raises(CapacityExceededError):
        await updater.apply(event.id, sign_up_transition("u1"), "Sign-up")

    async with asyncio.timeout(1):
        async with locks.hold(event.id):
            pass


async def test_lost_races_are_logged(caplog):
    event = make_event()
    store = ContendedEventStore([event])
    updater = EventUpdater(store, locks=EventLocks(), max_attempts=2)

    with caplog.at_level(logging.WARNING, logger="src.events.concurrency"):
        with pytest.raises(VersionConflictError):
            await updater.apply(event.id, sign_up_transition("u1"), "Sign-up")

    assert "Sign-up on event" in caplog.text
    assert "(attempt 1/2)" in caplog.text


@pytest.mark.parametrize(
    "read",
    [
        lambda read_model, event: read_model.get_event(event.id),
        lambda read_model, event: read_model.get_public_event(event.id),
        lambda read_model, event: read_model.list_active(frozenset({"dutch_garrison"}), NOW),
        lambda read_model, event: read_model.list_archived(frozenset({"dutch_garrison"}), NOW),
        lambda read_model, event: read_model.list_signed_up("u1", NOW),
    ],
)
async def test_slow_store_reads_time_out(read):
    event = make_event()
    read_model = StoreEventReadModel(SlowEventStore([event]), timeout=0.01)

    async with asyncio.timeout(2):
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await read(read_model, event)

    assert exc_info.value.retryable


async def test_cancelled_update_leaves_event_untouched():
    event = make_event()
    store = StalledPutEventStore([event])
    locks = EventLocks()
    updater = EventUpdater(store, locks=locks, timeout=30)

    task = asyncio.create_task(updater.apply(event.id, sign_up_transition("u1"), "Sign-up"))
    await store.put_started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert store.stored(event.id) == event
    assert store.stored(event.id).version == 1
    async with asyncio.timeout(1):
        async with locks.hold(event.id):
            pass
