from enum import Enum

from fileflow.dispatch.exceptions import (
    ClassificationError,
    InlineProcessingError,
    LightProcessingTimeoutError,
)
from fileflow.dispatch.inline_processor import InlineProcessor
from fileflow.events.base import BaseEventHandler
from fileflow.events.models import ChangeEvent, EventType
from fileflow.files.models import FileRecord, FileStatus, ProcessingTier
from fileflow.logging.logger import Log
from fileflow.store.base import UpdateOutcome
from fileflow.store.transitions import StatusTransitions
from fileflow.workers.exceptions import WorkerLaunchError
from fileflow.workers.launcher import WorkerPoolLauncher


class DispatchOutcome(str, Enum):
    IGNORED = "IGNORED"
    DUPLICATE = "DUPLICATE"
    MISSING = "MISSING"
    LAUNCHED = "LAUNCHED"
    BACKLOGGED = "BACKLOGGED"
    COMPLETED_INLINE = "COMPLETED_INLINE"


def classify(record: FileRecord) -> ProcessingTier:
    """Return the record's tier, rejecting records that cannot be routed."""
    if record.file_size is None or record.file_size < 0:
        raise ClassificationError(
            f"File {record.file_id} has invalid size {record.file_size!r}"
        )
    if record.processing_tier is None:
        raise ClassificationError(f"File {record.file_id} has no valid processing tier")
    return record.processing_tier


class Dispatcher(BaseEventHandler):
    """Routes freshly uploaded files to inline or worker processing.

    Duplicate deliveries are resolved by the UPLOADED -> PROCESSING
    conditional update: only the delivery that wins it does any work.
    """

    name = "dispatcher"

    def __init__(
        self,
        transitions: StatusTransitions,
        launcher: WorkerPoolLauncher,
        inline_processor: InlineProcessor,
    ) -> None:
        self._transitions = transitions
        self._launcher = launcher
        self._inline_processor = inline_processor

    def on_event(self, event: ChangeEvent) -> DispatchOutcome:
        if event.event_type not in (EventType.INSERT, EventType.MODIFY):
            return DispatchOutcome.IGNORED
        if event.new_status != FileStatus.UPLOADED.value:
            return DispatchOutcome.IGNORED

        record = event.new_record()
        outcome = self._transitions.advance(
            record.file_id, record.upload_date, FileStatus.UPLOADED, FileStatus.PROCESSING
        )
        if outcome is UpdateOutcome.PRECONDITION_FAILED:
            Log.debug(f"File {record.file_id} already claimed by another delivery")
            return DispatchOutcome.DUPLICATE
        if outcome is UpdateOutcome.NOT_FOUND:
            return DispatchOutcome.MISSING

        try:
            tier = classify(record)
        except ClassificationError as exc:
            self._transitions.fail(record.file_id, record.upload_date, str(exc))
            raise

        if tier is ProcessingTier.HEAVY:
            return self._hand_off_heavy(record)

        # InlineProcessor records its own failures.
        try:
            self._inline_processor.run(record)
        except (InlineProcessingError, LightProcessingTimeoutError):
            raise
        except Exception as exc:
            self._transitions.fail(record.file_id, record.upload_date, str(exc))
            raise
        return DispatchOutcome.COMPLETED_INLINE

    def _hand_off_heavy(self, record: FileRecord) -> DispatchOutcome:
        Log.info(f"File {record.file_id} requires heavy processing, dispatching a worker")
        try:
            handle = self._launcher.dispatch(record.file_id)
        except WorkerLaunchError:
            Log.error(f"File {record.file_id} left PROCESSING for reconciliation after launch failure")
            raise
        except Exception as exc:
            self._transitions.fail(record.file_id, record.upload_date, str(exc))
            raise
        if handle is None:
            return DispatchOutcome.BACKLOGGED
        return DispatchOutcome.LAUNCHED
