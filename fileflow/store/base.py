from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum

from fileflow.files.models import FileRecord, FileStatus


class UpdateOutcome(str, Enum):
    APPLIED = "APPLIED"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    NOT_FOUND = "NOT_FOUND"


class BaseStatusStore(ABC):
    """Contract for durable file-record storage with compare-and-swap on status."""

    @abstractmethod
    def get(self, file_id: str) -> FileRecord | None:
        """Return the most recent upload with this ``file_id``, or None."""

    @abstractmethod
    def insert(self, record: FileRecord) -> None:
        """Store a freshly uploaded record and emit an INSERT change event.

        Raises:
            StatusStoreError: if the record already exists or the write fails.
        """

    @abstractmethod
    def conditional_update_status(
        self,
        file_id: str,
        upload_date: datetime,
        expected: FileStatus,
        new_status: FileStatus,
    ) -> UpdateOutcome:
        """Set ``new_status`` only if the record is currently ``expected``.

        The check and the write are atomic per record. An applied update
        emits a MODIFY change event carrying both images.

        Returns:
            APPLIED, PRECONDITION_FAILED (record is in another state) or
            NOT_FOUND (no record with this key).

        Raises:
            StatusStoreError: on storage failure.
        """

    @abstractmethod
    def list_processing(self, updated_before: datetime) -> list[FileRecord]:
        """Return PROCESSING records whose last status write is older than the cutoff."""
