import threading
from datetime import datetime

from fileflow.events.memory_stream import InMemoryEventStream
from fileflow.events.models import EventType
from fileflow.files.models import FileRecord, FileStatus, utcnow
from fileflow.store.base import BaseStatusStore, UpdateOutcome
from fileflow.store.exceptions import StatusStoreError


class InMemoryStatusStore(BaseStatusStore):
    """Status store held in process memory, for local runs and tests.

    Every write publishes a change event to ``self.events`` so the store and
    its stream behave like a table with a change feed.
    """

    def __init__(self, events: InMemoryEventStream | None = None) -> None:
        self._lock = threading.Lock()
        self._records: dict[tuple[str, datetime], FileRecord] = {}
        self.events = events or InMemoryEventStream()

    def get(self, file_id: str) -> FileRecord | None:
        with self._lock:
            matches = [r for (fid, _), r in self._records.items() if fid == file_id]
        if not matches:
            return None
        return max(matches, key=lambda r: r.upload_date)

    def insert(self, record: FileRecord) -> None:
        key = (record.file_id, record.upload_date)
        with self._lock:
            if key in self._records:
                raise StatusStoreError(f"File {record.file_id} already exists")
            self._records[key] = record
            self.events.publish(EventType.INSERT, record.to_image())

    def conditional_update_status(
        self,
        file_id: str,
        upload_date: datetime,
        expected: FileStatus,
        new_status: FileStatus,
    ) -> UpdateOutcome:
        key = (file_id, upload_date)
        with self._lock:
            current = self._records.get(key)
            if current is None:
                return UpdateOutcome.NOT_FOUND
            if current.status is not expected:
                return UpdateOutcome.PRECONDITION_FAILED
            updated = current.with_status(new_status, utcnow())
            self._records[key] = updated
            self.events.publish(EventType.MODIFY, updated.to_image(), current.to_image())
        return UpdateOutcome.APPLIED

    def rewrite(self, record: FileRecord) -> None:
        """Overwrite a record without a status check, as unrelated metadata writes do."""
        key = (record.file_id, record.upload_date)
        with self._lock:
            previous = self._records.get(key)
            if previous is None:
                raise StatusStoreError(f"File {record.file_id} not found")
            self._records[key] = record
            self.events.publish(EventType.MODIFY, record.to_image(), previous.to_image())

    def list_processing(self, updated_before: datetime) -> list[FileRecord]:
        with self._lock:
            records = list(self._records.values())
        return [
            r
            for r in records
            if r.status is FileStatus.PROCESSING
            and r.updated_at is not None
            and r.updated_at < updated_before
        ]
