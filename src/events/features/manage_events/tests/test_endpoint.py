from datetime import timedelta

import pytest

from src.events.dependencies import get_event_store
from src.events.repository.tests.inmemory_event_store import InMemoryEventStore
from src.events.tests.factories import NOW, make_event
from src.events.urls import EVENT_URL, EVENTS_URL
from src.identity.auth import get_current_actor


def event_body(**overrides) -> dict:
    body = {
        "name": "Castle Open Day",
        "city": "Utrecht",
        "group_visibility": ["dutch_garrison"],
        "event_dates": [{"date": (NOW + timedelta(days=14)).isoformat(), "available_spots": 5}],
        "max_signup_date": (NOW + timedelta(days=7)).isoformat(),
        "gather_time": "09:00",
        "start_time": "10:00",
        "end_time": "17:00",
    }
    body.update(overrides)
    return body


@pytest.fixture
def store():
    return InMemoryEventStore()


@pytest.mark.asyncio
async def test_create_event(client_factory, store, organizer):
    overrides = {get_event_store: lambda: store, get_current_actor: lambda: organizer}

    async with client_factory(overrides) as client:
        response = await client.post(EVENTS_URL, json=event_body(publicly_accessible=True))

    assert response.status_code == 201
    data = response.json()
    assert data["version"] == 1
    assert data["publicly_accessible"] is True
    assert data["event_dates"][0]["available_spots"] == 5
    assert data["event_dates"][0]["signed_up_users"] == []


@pytest.mark.asyncio
async def test_create_event_needs_permission(client_factory, store, member):
    overrides = {get_event_store: lambda: store, get_current_actor: lambda: member}

    async with client_factory(overrides) as client:
        response = await client.post(EVENTS_URL, json=event_body())

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "forbidden"


@pytest.mark.asyncio
async def test_create_event_validates_payload(client_factory, store, organizer):
    overrides = {get_event_store: lambda: store, get_current_actor: lambda: organizer}

    async with client_factory(overrides) as client:
        response = await client.post(EVENTS_URL, json=event_body(event_dates=[]))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_event_archives(client_factory, organizer):
    event = make_event()
    store = InMemoryEventStore([event])
    overrides = {get_event_store: lambda: store, get_current_actor: lambda: organizer}
    kept = event.event_dates[0]

    async with client_factory(overrides) as client:
        response = await client.put(
            EVENT_URL.format(event_id=event.id),
            json=event_body(
                is_archived=True,
                expected_version=1,
                event_dates=[{"event_date_id": str(kept.id), "date": kept.date.isoformat()}],
            ),
        )

    assert response.status_code == 200
    data = response.json()
    assert data["is_archived"] is True
    assert data["version"] == 2
    assert data["event_dates"][0]["id"] == str(kept.id)


@pytest.mark.asyncio
async def test_update_with_stale_version_is_retryable(client_factory, organizer):
    event = make_event()
    store = InMemoryEventStore([event])
    overrides = {get_event_store: lambda: store, get_current_actor: lambda: organizer}

    async with client_factory(overrides) as client:
        response = await client.put(
            EVENT_URL.format(event_id=event.id), json=event_body(expected_version=7)
        )

    assert response.status_code == 503
    detail = response.json()["detail"]
    assert detail["code"] == "version_conflict"
    assert detail["source"] == "server"
    assert detail["retryable"] is True


@pytest.mark.asyncio
async def test_delete_event(client_factory, organizer):
    event = make_event()
    store = InMemoryEventStore([event])
    overrides = {get_event_store: lambda: store, get_current_actor: lambda: organizer}

    async with client_factory(overrides) as client:
        response = await client.delete(EVENT_URL.format(event_id=event.id))
        missing = await client.delete(EVENT_URL.format(event_id=event.id))

    assert response.status_code == 204
    assert missing.status_code == 404
