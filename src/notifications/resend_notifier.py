import logging
from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

import httpx

from src.events.errors import UpstreamUnavailableError
from src.notifications.base import NotificationReceipt, Notifier

logger = logging.getLogger(__name__)


class ResendConfig(Protocol):
    resend_api_key: str
    emails_from: str
    HTTP_TIMEOUT_SECONDS: float


class ResendNotifier(Notifier):
    # Resend accepts at most 50 addresses per message
    BATCH_SIZE = 50

    def __init__(
        self,
        config: ResendConfig,
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
        message_ids = []
        try:
            async with self._http_client_class(timeout=self._config.HTTP_TIMEOUT_SECONDS) as client:
                for start in range(0, len(recipients), self.BATCH_SIZE):
                    response = await client.post(
                        "https://api.resend.com/emails",
                        headers={
                            "Authorization": f"Bearer {self._config.resend_api_key}",
                            "Content-Type": "application/json",
                        },
                        json={
                            "from": self._config.emails_from,
                            "to": [self._config.emails_from],
                            "bcc": list(recipients[start : start + self.BATCH_SIZE]),
                            "subject": subject,
                            "html": html_body,
                        },
                    )
                    response.raise_for_status()
                    message_ids.append(response.json().get("id"))
        except httpx.HTTPError as e:
            logger.error(f"Resend bulk send '{subject}' failed after {len(message_ids)} batches: {e}")
            raise UpstreamUnavailableError("Mail service unavailable") from e

        return NotificationReceipt(recipients=len(recipients), message_ids=message_ids)
