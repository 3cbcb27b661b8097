from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class NotificationReceipt:
    """Acknowledgement of a bulk send."""

    recipients: int
    message_ids: list[str] = field(default_factory=list)


class Notifier(ABC):
    @abstractmethod
    async def send_bulk(
        self,
        recipients: Sequence[str],
        subject: str,
        html_body: str,
        event_id: UUID | None = None,
        description: str = "",
    ) -> NotificationReceipt:
        """Send one message to every recipient without exposing their addresses.

        Raises UpstreamUnavailableError when the mail transport fails.
        """
        raise NotImplementedError
