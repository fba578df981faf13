from abc import ABC, abstractmethod

NOTIFICATION_SUBJECT = "File Processing Completed"


def notification_body(file_name: str) -> str:
    return f'Your file "{file_name}" has been processed successfully.'


class BaseNotifier(ABC):
    """Contract for completion-notification delivery channels."""

    @abstractmethod
    def send(self, file_id: str, user_id: str, file_name: str) -> None:
        """Deliver one completion notification.

        Raises:
            NotificationDeliveryError: if delivery fails.
        """
