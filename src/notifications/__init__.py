from src.config.settings import settings
from src.notifications.base import NotificationReceipt, Notifier
from src.notifications.relay_notifier import MailRelayNotifier
from src.notifications.resend_notifier import ResendNotifier
from src.notifications.smtp_notifier import SMTPNotifier


def get_notifier() -> Notifier:
    if settings.MAIL_RELAY_URL:
        return MailRelayNotifier(config=settings)
    if settings.resend_api_key:
        return ResendNotifier(config=settings)
    return SMTPNotifier()


__all__ = [
    "NotificationReceipt",
    "Notifier",
    "get_notifier",
]
