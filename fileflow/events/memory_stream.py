import itertools
import threading
from dataclasses import replace
from typing import Any

from fileflow.events.base import BaseEventStream
from fileflow.events.models import ChangeEvent, EventType
from fileflow.logging.logger import Log


class InMemoryEventStream(BaseEventStream):
    """Process-local change stream fed by InMemoryStatusStore.

    Keeps per-file ordering: an event is not handed out while an earlier
    event for the same file is still pending or in flight.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._pending: list[ChangeEvent] = []
        self._in_flight: dict[str, ChangeEvent] = {}
        self.dead_letters: list[tuple[ChangeEvent, str]] = []

    def publish(
        self,
        event_type: EventType,
        new_image: dict[str, Any],
        old_image: dict[str, Any] | None = None,
    ) -> ChangeEvent:
        with self._lock:
            event = ChangeEvent(
                event_id=str(next(self._ids)),
                event_type=event_type,
                new_image=new_image,
                old_image=old_image,
            )
            self._pending.append(event)
        return event

    def poll(self, limit: int) -> list[ChangeEvent]:
        with self._lock:
            blocked = {event.file_id for event in self._in_flight.values()}
            claimed: list[ChangeEvent] = []
            for event in sorted(self._pending, key=lambda e: int(e.event_id)):
                if len(claimed) >= limit:
                    break
                if event.file_id in blocked:
                    continue
                blocked.add(event.file_id)
                claimed.append(event)
            for event in claimed:
                self._pending.remove(event)
                self._in_flight[event.event_id] = event
        return claimed

    def ack(self, event: ChangeEvent) -> None:
        with self._lock:
            self._in_flight.pop(event.event_id, None)

    def release(self, event: ChangeEvent, error: str) -> None:
        with self._lock:
            self._in_flight.pop(event.event_id, None)
            self._pending.append(replace(event, attempts=event.attempts + 1))
        Log.warning(f"Event {event.event_id} released for redelivery: {error}")

    def discard(self, event: ChangeEvent, error: str) -> None:
        with self._lock:
            self._in_flight.pop(event.event_id, None)
            self.dead_letters.append((replace(event, attempts=event.attempts + 1), error))
        Log.error(f"Event {event.event_id} dead-lettered: {error}")

    @property
    def backlog(self) -> int:
        with self._lock:
            return len(self._pending) + len(self._in_flight)
