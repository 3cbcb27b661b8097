import asyncio
import logging
import smtplib
from collections.abc import Sequence
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from uuid import UUID

from src.config.settings import settings
from src.events.errors import UpstreamUnavailableError
from src.notifications.base import NotificationReceipt, Notifier

logger = logging.getLogger(__name__)


class SMTPNotifier(Notifier):
    def __init__(self):
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.smtp_user
        self.password = settings.smtp_password
        self.from_address = settings.emails_from
        self.timeout = settings.HTTP_TIMEOUT_SECONDS

    def _create_message(self, subject: str, html_body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = self.from_address
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def _send(self, msg: MIMEMultipart, recipients: Sequence[str]) -> None:
        # recipients only go on the envelope, never in the headers
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.username and self.password:
                server.starttls()
                server.login(self.username, self.password)
            server.send_message(msg, to_addrs=list(recipients))

    async def send_bulk(
        self,
        recipients: Sequence[str],
        subject: str,
        html_body: str,
        event_id: UUID | None = None,
        description: str = "",
    ) -> NotificationReceipt:
        msg = self._create_message(subject, html_body)
        try:
            await asyncio.to_thread(self._send, msg, recipients)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP bulk send '{subject}' failed: {e}")
            raise UpstreamUnavailableError("Mail server unavailable") from e
        return NotificationReceipt(recipients=len(recipients))
