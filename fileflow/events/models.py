from dataclasses import dataclass
from enum import Enum
from typing import Any

from fileflow.events.exceptions import InvalidEventError
from fileflow.files.models import FileRecord, FileStatus


class EventType(str, Enum):
    INSERT = "INSERT"
    MODIFY = "MODIFY"
    REMOVE = "REMOVE"


@dataclass(frozen=True)
class ChangeEvent:
    """One delivery of a change notification over a file record.

    Deliveries are at-least-once: the same ``event_id`` may be seen again
    after a release or a visibility timeout.
    """

    event_id: str
    event_type: EventType
    new_image: dict[str, Any]
    old_image: dict[str, Any] | None = None
    attempts: int = 0

    @property
    def file_id(self) -> str | None:
        value = self.new_image.get("fileId")
        return value if isinstance(value, str) else None

    @property
    def new_status(self) -> str | None:
        return self.new_image.get("status")

    @property
    def old_status(self) -> str | None:
        if self.old_image is None:
            return None
        return self.old_image.get("status")

    def new_record(self) -> FileRecord:
        return FileRecord.from_image(self.new_image)

    def is_transition_into(self, status: FileStatus) -> bool:
        """True when the new image enters ``status`` from a different state."""
        if self.new_status != status.value:
            return False
        return self.old_image is None or self.old_status != status.value

    @classmethod
    def from_stream_record(cls, record: dict[str, Any]) -> "ChangeEvent":
        """Build an event from a stream record with plain (unmarshalled) images.

        Expected shape::

            {"eventID": "...", "eventName": "INSERT" | "MODIFY" | "REMOVE",
             "dynamodb": {"NewImage": {...}, "OldImage": {...}}}

        Raises:
            InvalidEventError: on unknown event names or a missing new image.
        """
        try:
            event_type = EventType(record.get("eventName"))
        except ValueError as exc:
            raise InvalidEventError(
                f"Unknown stream event name {record.get('eventName')!r}"
            ) from exc

        change = record.get("dynamodb") or {}
        new_image = change.get("NewImage")
        if not isinstance(new_image, dict):
            raise InvalidEventError(f"Stream record {record.get('eventID')} has no NewImage")
        old_image = change.get("OldImage")

        return cls(
            event_id=str(record.get("eventID") or ""),
            event_type=event_type,
            new_image=new_image,
            old_image=old_image if isinstance(old_image, dict) else None,
        )
