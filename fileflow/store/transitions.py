from datetime import datetime

from fileflow.files.models import FileStatus
from fileflow.logging.logger import Log
from fileflow.store.base import BaseStatusStore, UpdateOutcome
from fileflow.store.exceptions import InvalidStatusTransitionError

ALLOWED_TRANSITIONS: dict[FileStatus, frozenset[FileStatus]] = {
    FileStatus.UPLOADED: frozenset({FileStatus.PROCESSING}),
    FileStatus.PROCESSING: frozenset({FileStatus.COMPLETED, FileStatus.ERROR}),
    FileStatus.COMPLETED: frozenset(),
    FileStatus.ERROR: frozenset(),
}


class StatusTransitions:
    """Single path for lifecycle status changes.

    Rejects transitions outside the lifecycle table before touching the store,
    then delegates to the store's conditional update.
    """

    def __init__(self, store: BaseStatusStore) -> None:
        self._store = store

    def advance(
        self,
        file_id: str,
        upload_date: datetime,
        expected: FileStatus,
        new_status: FileStatus,
    ) -> UpdateOutcome:
        if new_status not in ALLOWED_TRANSITIONS[expected]:
            raise InvalidStatusTransitionError(
                f"File {file_id}: {expected.value} -> {new_status.value} is not allowed"
            )

        outcome = self._store.conditional_update_status(
            file_id, upload_date, expected, new_status
        )
        if outcome is UpdateOutcome.APPLIED:
            Log.info(f"File {file_id} status {expected.value} -> {new_status.value}")
        elif outcome is UpdateOutcome.PRECONDITION_FAILED:
            Log.debug(
                f"File {file_id} no longer {expected.value}, "
                f"skipping transition to {new_status.value}"
            )
        else:
            Log.warning(f"File {file_id} not found, cannot move to {new_status.value}")
        return outcome

    def fail(self, file_id: str, upload_date: datetime, reason: str) -> UpdateOutcome:
        """Move a PROCESSING file to ERROR."""
        Log.error(f"File {file_id} failed: {reason}")
        return self.advance(file_id, upload_date, FileStatus.PROCESSING, FileStatus.ERROR)
