from fastapi import APIRouter, Depends

from src.events.dependencies import get_event_store
from src.events.features.roster.dtos import (
    ChangeCostumeRequest,
    SignOutRequest,
    SignUpGuestRequest,
    SignUpRequest,
)
from src.events.features.roster.write_model import RosterWriteModel, StoreRosterWriteModel
from src.events.repository.event_store import EventStore
from src.events.schemas import EventResponse
from src.events.urls import CHANGE_COSTUME_URL, SIGN_OUT_URL, SIGN_UP_GUEST_URL, SIGN_UP_URL
from src.identity.auth import get_current_actor
from src.identity.dtos import Actor

router = APIRouter()


def get_roster_write_model(
    event_store: EventStore = Depends(get_event_store),
) -> RosterWriteModel:
    """Dependency to get roster write model instance."""
    return StoreRosterWriteModel(event_store)


@router.put(SIGN_UP_URL, response_model=EventResponse)
async def sign_up(
    request: SignUpRequest,
    actor: Actor = Depends(get_current_actor),
    write_model: RosterWriteModel = Depends(get_roster_write_model),
) -> EventResponse:
    """
    Sign the calling member up for one event date.
    The roster entry is always recorded under the verified caller's identity.
    """
    event = await write_model.sign_up(
        event_id=request.event_id,
        ref=request.date_ref,
        user_id=actor.identity,
        username=request.username,
        costume=request.costume,
        avatar=request.avatar,
        groups=actor.groups,
    )
    return EventResponse.from_event(event)


@router.put(SIGN_UP_GUEST_URL, response_model=EventResponse)
async def sign_up_guest(
    request: SignUpGuestRequest,
    actor: Actor = Depends(get_current_actor),
    write_model: RosterWriteModel = Depends(get_roster_write_model),
) -> EventResponse:
    event = await write_model.add_guest(
        event_id=request.event_id,
        ref=request.date_ref,
        guest_name=request.guest_name,
        actor=actor,
    )
    return EventResponse.from_event(event)


@router.post(SIGN_OUT_URL, response_model=EventResponse)
async def sign_out(
    request: SignOutRequest,
    actor: Actor = Depends(get_current_actor),
    write_model: RosterWriteModel = Depends(get_roster_write_model),
) -> EventResponse:
    """
    Move the caller's roster entry to the cancelled list.
    Members can only sign themselves out.
    """
    event = await write_model.sign_out(
        event_id=request.event_id,
        ref=request.date_ref,
        user_id=request.user_id,
        reason=request.signout_reason,
        actor=actor,
    )
    return EventResponse.from_event(event)


@router.post(CHANGE_COSTUME_URL, response_model=EventResponse)
async def change_costume(
    request: ChangeCostumeRequest,
    actor: Actor = Depends(get_current_actor),
    write_model: RosterWriteModel = Depends(get_roster_write_model),
) -> EventResponse:
    event = await write_model.change_costume(
        event_id=request.event_id,
        ref=request.date_ref,
        user_id=request.user_id,
        costume=request.costume,
        avatar=request.avatar,
        actor=actor,
    )
    return EventResponse.from_event(event)
