from fileflow.logging.logger import Log
from fileflow.notifications.base import NOTIFICATION_SUBJECT, BaseNotifier, notification_body


class LogNotifier(BaseNotifier):
    """Writes the notification that would be sent to the log."""

    def send(self, file_id: str, user_id: str, file_name: str) -> None:
        Log.info(
            f"Notification for file {file_id}: To: User {user_id} | "
            f"Subject: {NOTIFICATION_SUBJECT} | Body: {notification_body(file_name)}"
        )
