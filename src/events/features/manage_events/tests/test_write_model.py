from dataclasses import replace
from datetime import timedelta
from uuid import uuid4

import pytest

from src.events import roster
from src.events.concurrency import EventLocks, EventUpdater
from src.events.dtos import EventDateRef
from src.events.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    VersionConflictError,
)
from src.events.features.manage_events.dtos import EventDateInput, EventPayload
from src.events.features.manage_events.write_model import StoreEventWriteModel, reschedule
from src.events.repository.tests.inmemory_event_store import InMemoryEventStore
from src.events.tests.factories import NOW, make_event


def payload(**overrides) -> EventPayload:
    fields = dict(
        name="Castle Open Day",
        city="Utrecht",
        group_visibility=["dutch_garrison"],
        event_dates=[{"date": NOW + timedelta(days=14), "available_spots": 5}],
        max_signup_date=NOW + timedelta(days=7),
        gather_time="09:00",
        start_time="10:00",
        end_time="17:00",
    )
    fields.update(overrides)
    return EventPayload.model_validate(fields)


def with_member(event, index=0):
    return roster.sign_up(
        event,
        EventDateRef(event_date_index=index),
        user_id="u1",
        username="U1",
        costume="TK",
        now=NOW,
    )


def write_model_for(store):
    return StoreEventWriteModel(store, updater=EventUpdater(store, locks=EventLocks()))


class TestReschedule:
    def test_new_dates_get_fresh_ids_and_empty_rosters(self):
        dates = reschedule(
            (),
            [
                EventDateInput(date=NOW, available_spots=3),
                EventDateInput(date=NOW + timedelta(days=1), open=False),
            ],
        )

        assert len(dates) == 2
        assert dates[0].id != dates[1].id
        assert dates[0].available_spots == 3
        assert dates[1].open is False
        assert all(not event_date.has_participants for event_date in dates)

    def test_listed_date_keeps_roster(self):
        event = with_member(make_event())
        current = event.event_dates[0]

        dates = reschedule(
            event.event_dates,
            [
                EventDateInput(
                    event_date_id=current.id,
                    date=current.date + timedelta(hours=2),
                    available_spots=10,
                )
            ],
        )

        assert dates[0].id == current.id
        assert dates[0].signed_up_users == current.signed_up_users
        assert dates[0].available_spots == 10
        assert dates[0].date == current.date + timedelta(hours=2)

    def test_empty_date_can_be_dropped(self):
        event = make_event()

        dates = reschedule(event.event_dates, [EventDateInput(date=NOW + timedelta(days=30))])

        assert len(dates) == 1
        assert dates[0].id != event.event_dates[0].id

    def test_date_with_sign_ups_cannot_be_dropped(self):
        event = with_member(make_event())

        with pytest.raises(ConflictError):
            reschedule(event.event_dates, [EventDateInput(date=NOW + timedelta(days=30))])

    def test_unknown_date_id(self):
        with pytest.raises(NotFoundError):
            reschedule(
                make_event().event_dates,
                [EventDateInput(event_date_id=uuid4(), date=NOW)],
            )

    def test_date_listed_twice(self):
        current = make_event().event_dates[0]

        with pytest.raises(InvalidInputError):
            reschedule(
                (current,),
                [
                    EventDateInput(event_date_id=current.id, date=NOW),
                    EventDateInput(event_date_id=current.id, date=NOW),
                ],
            )


async def test_create_event():
    store = InMemoryEventStore()

    event = await write_model_for(store).create_event(payload())

    assert event.version == 1
    assert event.group_visibility == frozenset({"dutch_garrison"})
    assert event.event_dates[0].available_spots == 5
    assert store.stored(event.id) == event


async def test_update_event_keeps_rosters():
    event = with_member(make_event())
    store = InMemoryEventStore([event])
    kept = event.event_dates[0]

    updated = await write_model_for(store).update_event(
        event.id,
        payload(
            name="Castle Open Day (moved)",
            event_dates=[
                {"event_date_id": str(kept.id), "date": kept.date, "available_spots": 4},
                {"date": kept.date + timedelta(days=1)},
            ],
        ),
    )

    assert updated.id == event.id
    assert updated.version == 2
    assert updated.name == "Castle Open Day (moved)"
    assert updated.event_dates[0].signed_up_users == kept.signed_up_users
    assert updated.event_dates[1].signed_up_users == ()


async def test_update_with_stale_version():
    event = replace(make_event(), version=3)
    store = InMemoryEventStore([event])

    with pytest.raises(VersionConflictError):
        await write_model_for(store).update_event(event.id, payload(), expected_version=2)

    assert store.stored(event.id) == event


async def test_archive_event():
    event = make_event()
    store = InMemoryEventStore([event])

    archived = await write_model_for(store).archive_event(event.id)

    assert archived.is_archived
    assert store.stored(event.id).is_archived


async def test_delete_event():
    event = make_event()
    store = InMemoryEventStore([event])
    write_model = write_model_for(store)

    await write_model.delete_event(event.id)

    with pytest.raises(NotFoundError):
        await store.get(event.id)
    with pytest.raises(NotFoundError):
        await write_model.delete_event(event.id)


def test_payload_rejects_unknown_group():
    with pytest.raises(ValueError):
        payload(group_visibility=["death_star"])


def test_payload_needs_a_date():
    with pytest.raises(ValueError):
        payload(event_dates=[])


def test_payload_needs_timezone():
    with pytest.raises(ValueError):
        payload(max_signup_date="2026-06-01T12:00:00")
