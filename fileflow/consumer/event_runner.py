from collections.abc import Sequence

from fileflow.config.settings import Settings
from fileflow.events.base import BaseEventHandler, BaseEventStream
from fileflow.events.models import ChangeEvent
from fileflow.logging.logger import Log


class EventRunner:
    """Run one event through every handler, then ack, release or dead-letter it."""

    def __init__(
        self,
        handlers: Sequence[BaseEventHandler],
        stream: BaseEventStream,
        settings: Settings,
    ) -> None:
        self._handlers = list(handlers)
        self._stream = stream
        self._settings = settings

    def run(self, event: ChangeEvent) -> bool:
        """Handle a single delivery. Returns True when every handler succeeded."""
        Log.debug(
            f"Running event {event.event_id} ({event.event_type.value}) for file "
            f"{event.file_id} (attempt {event.attempts + 1})"
        )
        errors: list[str] = []
        for handler in self._handlers:
            try:
                result = handler.on_event(event)
                Log.debug(f"Event {event.event_id}: {handler.name} -> {result}")
            except Exception as exc:
                Log.error(f"Event {event.event_id}: {handler.name} failed: {exc}")
                errors.append(f"{handler.name}: {exc}")

        if errors:
            self._handle_failure(event, "; ".join(errors))
            return False
        self._stream.ack(event)
        return True

    def _handle_failure(self, event: ChangeEvent, error: str) -> None:
        """Release for redelivery, or dead-letter once attempts are exhausted."""
        if event.attempts + 1 >= self._settings.max_event_attempts:
            self._stream.discard(event, error)
            Log.error(
                f"Event {event.event_id} permanently failed after {event.attempts + 1} attempts"
            )
        else:
            self._stream.release(event, error)
            Log.warning(f"Event {event.event_id} will be retried (attempt {event.attempts + 1})")
