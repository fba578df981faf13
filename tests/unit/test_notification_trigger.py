from unittest.mock import MagicMock

from fileflow.events.models import ChangeEvent, EventType
from fileflow.notifications.exceptions import NotificationDeliveryError
from fileflow.notifications.trigger import NotificationTrigger
from tests.helpers import make_record


def _event(
    new_status: str,
    old_status: str | None,
    event_type: EventType = EventType.MODIFY,
) -> ChangeEvent:
    record = make_record()
    new_image = {**record.to_image(), "status": new_status}
    old_image = {**record.to_image(), "status": old_status} if old_status else None
    return ChangeEvent(event_id="1", event_type=event_type, new_image=new_image, old_image=old_image)


class TestNotificationTrigger:
    def test_fires_on_transition_into_completed(self) -> None:
        notifier = MagicMock()

        assert NotificationTrigger(notifier).on_event(_event("COMPLETED", "PROCESSING")) is True

        notifier.send.assert_called_once_with("file-1", "user-1", "report.pdf")

    def test_fires_without_old_image(self) -> None:
        notifier = MagicMock()

        assert NotificationTrigger(notifier).on_event(_event("COMPLETED", None)) is True
        notifier.send.assert_called_once()

    def test_edge_triggered_over_rewrite_sequence(self) -> None:
        notifier = MagicMock()
        trigger = NotificationTrigger(notifier)

        trigger.on_event(_event("COMPLETED", "PROCESSING"))
        trigger.on_event(_event("COMPLETED", "COMPLETED"))

        assert notifier.send.call_count == 1

    def test_ignores_insert_events(self) -> None:
        notifier = MagicMock()

        assert not NotificationTrigger(notifier).on_event(
            _event("COMPLETED", None, EventType.INSERT)
        )
        notifier.send.assert_not_called()

    def test_ignores_other_statuses(self) -> None:
        notifier = MagicMock()
        trigger = NotificationTrigger(notifier)

        trigger.on_event(_event("PROCESSING", "UPLOADED"))
        trigger.on_event(_event("ERROR", "PROCESSING"))

        notifier.send.assert_not_called()

    def test_delivery_failure_is_logged_not_raised(self) -> None:
        notifier = MagicMock()
        notifier.send.side_effect = NotificationDeliveryError("smtp down")

        assert NotificationTrigger(notifier).on_event(_event("COMPLETED", "PROCESSING")) is False
