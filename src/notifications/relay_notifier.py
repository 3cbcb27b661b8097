import logging
from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

import httpx

from src.events.errors import UpstreamUnavailableError
from src.notifications.base import NotificationReceipt, Notifier

logger = logging.getLogger(__name__)


class RelayConfig(Protocol):
    MAIL_RELAY_URL: str
    HTTP_TIMEOUT_SECONDS: float


class MailRelayNotifier(Notifier):
    """Hands the message to the organization's mail relay, which fans it out."""

    def __init__(
        self,
        config: RelayConfig,
        http_client_class: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        self._config = config
        self._http_client_class = http_client_class

    async def send_bulk(
        self,
        recipients: Sequence[str],
        subject: str,
        html_body: str,
        event_id: UUID | None = None,
        description: str = "",
    ) -> NotificationReceipt:
        form = {
            "html": html_body,
            "description": description,
            "eventId": str(event_id) if event_id else "",
            "title": subject,
            "users": list(recipients),
        }
        try:
            async with self._http_client_class(timeout=self._config.HTTP_TIMEOUT_SECONDS) as client:
                response = await client.post(self._config.MAIL_RELAY_URL, data=form)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Mail relay rejected '{subject}': {e}")
            raise UpstreamUnavailableError("Mail relay unavailable") from e

        return NotificationReceipt(recipients=len(recipients), message_ids=[response.text])
