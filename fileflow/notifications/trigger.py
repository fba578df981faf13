from fileflow.events.base import BaseEventHandler
from fileflow.events.models import ChangeEvent, EventType
from fileflow.files.models import FileStatus
from fileflow.logging.logger import Log
from fileflow.notifications.base import BaseNotifier
from fileflow.notifications.exceptions import NotificationDeliveryError


class NotificationTrigger(BaseEventHandler):
    """Sends one notification when a file transitions into COMPLETED.

    Rewrites of an already COMPLETED record do not fire. Delivery is
    best-effort: failures are logged and never touch the file record.
    """

    name = "notification_trigger"

    def __init__(self, notifier: BaseNotifier) -> None:
        self._notifier = notifier

    def on_event(self, event: ChangeEvent) -> bool:
        """Return True if a notification was delivered for this event."""
        if event.event_type is not EventType.MODIFY:
            return False
        if not event.is_transition_into(FileStatus.COMPLETED):
            return False

        record = event.new_record()
        Log.info(
            f"Processing completed for file {record.file_id}, "
            f"sending notification to user {record.user_id}"
        )
        try:
            self._notifier.send(record.file_id, record.user_id, record.file_name)
        except NotificationDeliveryError as exc:
            Log.error(f"Notification for file {record.file_id} not delivered: {exc}")
            return False
        return True
