"""Write model for mailing members about an event."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import UUID

from src.config.settings import settings
from src.events.concurrency import bounded
from src.events.repository.event_store import EventStore
from src.identity.directory import ProfileDirectory
from src.notifications.base import Notifier
from src.notifications.recipients import eligible_recipients

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotifyMembersResult:
    event_id: UUID
    recipients: int
    sent: bool


class NotifyMembersWriteModel(ABC):
    @abstractmethod
    async def notify_members(self, event_id: UUID, html_body: str) -> NotifyMembersResult:
        """Mail every member eligible for the event's groups."""
        raise NotImplementedError


class StoreNotifyMembersWriteModel(NotifyMembersWriteModel):
    def __init__(
        self,
        event_store: EventStore,
        directory: ProfileDirectory,
        notifier: Notifier,
    ) -> None:
        self._event_store = event_store
        self._directory = directory
        self._notifier = notifier

    async def notify_members(self, event_id: UUID, html_body: str) -> NotifyMembersResult:
        event = await bounded(
            self._event_store.get(event_id), settings.STORE_TIMEOUT_SECONDS, "Loading event"
        )
        profiles = await self._directory.list_all_profiles()
        recipients = eligible_recipients(event, profiles)
        if not recipients:
            logger.warning(f"No eligible recipients for event {event_id}, nothing sent")
            return NotifyMembersResult(event_id=event_id, recipients=0, sent=False)

        receipt = await self._notifier.send_bulk(
            recipients,
            subject=event.name,
            html_body=html_body,
            event_id=event.id,
            description=event.description,
        )
        logger.info(f"Mailed {receipt.recipients} members about event {event_id}")
        return NotifyMembersResult(event_id=event_id, recipients=receipt.recipients, sent=True)
