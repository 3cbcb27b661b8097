from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.events.dependencies import get_event_store
from src.events.features.notify_members.write_model import (
    NotifyMembersWriteModel,
    StoreNotifyMembersWriteModel,
)
from src.events.repository.event_store import EventStore
from src.events.urls import NOTIFY_MEMBERS_URL
from src.identity.auth import require_permission
from src.identity.directory import ProfileDirectory, get_profile_directory
from src.identity.dtos import Actor
from src.identity.permissions import MANAGE_EVENTS
from src.notifications import Notifier, get_notifier

router = APIRouter()


class NotifyMembersRequest(BaseModel):
    id: UUID
    html: str = Field(min_length=1)


class NotifyMembersResponse(BaseModel):
    event_id: UUID
    recipients: int
    sent: bool


def get_notify_members_write_model(
    event_store: EventStore = Depends(get_event_store),
    directory: ProfileDirectory = Depends(get_profile_directory),
    notifier: Notifier = Depends(get_notifier),
) -> NotifyMembersWriteModel:
    """Dependency to get notify members write model instance."""
    return StoreNotifyMembersWriteModel(event_store, directory, notifier)


@router.post(NOTIFY_MEMBERS_URL, response_model=NotifyMembersResponse)
async def notify_members(
    request: NotifyMembersRequest,
    actor: Actor = Depends(require_permission(MANAGE_EVENTS)),
    write_model: NotifyMembersWriteModel = Depends(get_notify_members_write_model),
) -> NotifyMembersResponse:
    """
    Mail an already rendered HTML message about an event to every member
    allowed to sign up for it.
    """
    result = await write_model.notify_members(request.id, request.html)
    return NotifyMembersResponse(
        event_id=result.event_id, recipients=result.recipients, sent=result.sent
    )
