from uuid import UUID

from fastapi import APIRouter, Depends

from src.events.dependencies import get_event_store
from src.events.features.manage_events.dtos import EventPayload, EventUpdatePayload
from src.events.features.manage_events.write_model import EventWriteModel, StoreEventWriteModel
from src.events.repository.event_store import EventStore
from src.events.schemas import EventResponse
from src.events.urls import EVENT_URL, EVENTS_URL
from src.identity.auth import require_permission
from src.identity.dtos import Actor
from src.identity.permissions import MANAGE_EVENTS

router = APIRouter()


def get_event_write_model(event_store: EventStore = Depends(get_event_store)) -> EventWriteModel:
    """Dependency to get event write model instance."""
    return StoreEventWriteModel(event_store)


@router.post(EVENTS_URL, response_model=EventResponse, status_code=201)
async def create_event(
    payload: EventPayload,
    actor: Actor = Depends(require_permission(MANAGE_EVENTS)),
    write_model: EventWriteModel = Depends(get_event_write_model),
) -> EventResponse:
    event = await write_model.create_event(payload)
    return EventResponse.from_event(event)


@router.put(EVENT_URL, response_model=EventResponse)
async def update_event(
    event_id: UUID,
    payload: EventUpdatePayload,
    actor: Actor = Depends(require_permission(MANAGE_EVENTS)),
    write_model: EventWriteModel = Depends(get_event_write_model),
) -> EventResponse:
    """
    Replace an event's details and schedule.
    Dates listed with their event_date_id keep their rosters.
    """
    event = await write_model.update_event(
        event_id, payload, expected_version=payload.expected_version
    )
    return EventResponse.from_event(event)


@router.delete(EVENT_URL, status_code=204)
async def delete_event(
    event_id: UUID,
    actor: Actor = Depends(require_permission(MANAGE_EVENTS)),
    write_model: EventWriteModel = Depends(get_event_write_model),
) -> None:
    await write_model.delete_event(event_id)
