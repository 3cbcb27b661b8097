from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Depends

from src.events.dependencies import get_event_read_model
from src.events.repository.read_models import EventReadModel
from src.events.schemas import EventResponse, PublicEventResponse
from src.events.urls import (
    ACTIVE_EVENTS_URL,
    ARCHIVED_EVENTS_URL,
    EVENT_URL,
    PUBLIC_EVENT_URL,
    SIGNED_UP_EVENTS_URL,
    USER_SIGNED_UP_EVENTS_URL,
)
from src.identity.auth import get_current_actor, require_permission
from src.identity.dtos import Actor
from src.identity.permissions import MANAGE_EVENTS

router = APIRouter()


def get_as_of() -> datetime:
    """Reference time for visibility checks. Override in tests."""
    return datetime.now(UTC)


@router.get(PUBLIC_EVENT_URL, response_model=PublicEventResponse)
async def get_public_event(
    event_id: UUID,
    read_model: EventReadModel = Depends(get_event_read_model),
) -> PublicEventResponse:
    """Look up a publicly accessible event without a token."""
    event = await read_model.get_public_event(event_id)
    return PublicEventResponse.model_validate(event)


@router.get(ACTIVE_EVENTS_URL, response_model=list[EventResponse])
async def list_active_events(
    actor: Actor = Depends(get_current_actor),
    as_of: datetime = Depends(get_as_of),
    read_model: EventReadModel = Depends(get_event_read_model),
) -> list[EventResponse]:
    """Upcoming, unarchived events of the caller's groups."""
    events = await read_model.list_active(actor.groups, as_of)
    return [EventResponse.from_event(event) for event in events]


@router.get(ARCHIVED_EVENTS_URL, response_model=list[EventResponse])
async def list_archived_events(
    actor: Actor = Depends(get_current_actor),
    as_of: datetime = Depends(get_as_of),
    read_model: EventReadModel = Depends(get_event_read_model),
) -> list[EventResponse]:
    events = await read_model.list_archived(actor.groups, as_of)
    return [EventResponse.from_event(event) for event in events]


@router.get(SIGNED_UP_EVENTS_URL, response_model=list[EventResponse])
async def list_signed_up_events(
    actor: Actor = Depends(get_current_actor),
    as_of: datetime = Depends(get_as_of),
    read_model: EventReadModel = Depends(get_event_read_model),
) -> list[EventResponse]:
    events = await read_model.list_signed_up(actor.identity, as_of)
    return [EventResponse.from_event(event) for event in events]


@router.get(USER_SIGNED_UP_EVENTS_URL, response_model=list[EventResponse])
async def list_signed_up_events_for_user(
    user_id: str,
    actor: Actor = Depends(require_permission(MANAGE_EVENTS)),
    as_of: datetime = Depends(get_as_of),
    read_model: EventReadModel = Depends(get_event_read_model),
) -> list[EventResponse]:
    events = await read_model.list_signed_up(user_id, as_of)
    return [EventResponse.from_event(event) for event in events]


@router.get(EVENT_URL, response_model=EventResponse)
async def get_event(
    event_id: UUID,
    actor: Actor = Depends(get_current_actor),
    read_model: EventReadModel = Depends(get_event_read_model),
) -> EventResponse:
    return EventResponse.from_event(await read_model.get_event(event_id))
