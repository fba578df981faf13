import httpx

from fileflow.notifications.base import NOTIFICATION_SUBJECT, BaseNotifier, notification_body
from fileflow.notifications.exceptions import NotificationDeliveryError


class WebhookNotifier(BaseNotifier):
    """Posts completion notifications as JSON to a webhook URL."""

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: int,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def send(self, file_id: str, user_id: str, file_name: str) -> None:
        payload = {
            "fileId": file_id,
            "userId": user_id,
            "fileName": file_name,
            "subject": NOTIFICATION_SUBJECT,
            "body": notification_body(file_name),
        }
        try:
            response = self._client.post(self._url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationDeliveryError(
                f"Webhook delivery failed for file {file_id}: {exc}"
            ) from exc

    def close(self) -> None:
        self._client.close()
