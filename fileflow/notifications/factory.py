from fileflow.config.settings import Settings
from fileflow.notifications.base import BaseNotifier
from fileflow.notifications.log_notifier import LogNotifier
from fileflow.notifications.webhook_notifier import WebhookNotifier


class NotifierFactory:
    """Creates the configured notification channel."""

    @classmethod
    def create(cls, settings: Settings) -> BaseNotifier:
        notifier = settings.notifier.lower()
        if notifier == "log":
            return LogNotifier()
        if notifier == "webhook":
            url = settings.notification_webhook_url.strip()
            if not url:
                raise ValueError("notification_webhook_url is required for notifier=webhook")
            return WebhookNotifier(url=url, timeout_seconds=settings.notification_timeout_seconds)
        raise ValueError(f"Unknown notifier '{notifier}'. Choose from: ['log', 'webhook']")
