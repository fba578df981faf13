import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait

from fileflow.dispatch.exceptions import InlineProcessingError, LightProcessingTimeoutError
from fileflow.files.models import FileRecord, FileStatus
from fileflow.logging.logger import Log
from fileflow.store.base import UpdateOutcome
from fileflow.store.transitions import StatusTransitions

LightTask = Callable[[FileRecord], None]


class SimulatedLightTask:
    """Stands in for light processing by sleeping for a fixed delay."""

    def __init__(self, delay_seconds: float) -> None:
        self._delay_seconds = delay_seconds

    def __call__(self, record: FileRecord) -> None:
        if self._delay_seconds > 0:
            time.sleep(self._delay_seconds)


class InlineProcessor:
    """Runs light processing under a deadline and records the result.

    The task runs on a short-lived helper thread so the calling event thread
    can give up once the budget is spent. An abandoned task may finish in the
    background; its result is dropped.
    """

    def __init__(
        self,
        transitions: StatusTransitions,
        task: LightTask,
        budget_seconds: float,
    ) -> None:
        self._transitions = transitions
        self._task = task
        self._budget_seconds = budget_seconds

    def run(self, record: FileRecord) -> None:
        """Process a PROCESSING file and move it to COMPLETED.

        Raises:
            InlineProcessingError: the task failed; the file is now ERROR.
            LightProcessingTimeoutError: the task overran the light budget;
                the result is dropped and the file stays PROCESSING.
        """
        Log.info(f"File {record.file_id} requires light processing, handling inline")
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fileflow-light")
        future = executor.submit(self._task, record)
        executor.shutdown(wait=False)

        done, _ = wait([future], timeout=self._budget_seconds)
        if not done:
            Log.error(
                f"Light processing of file {record.file_id} overran the "
                f"{self._budget_seconds:.2f}s budget; left PROCESSING"
            )
            raise LightProcessingTimeoutError(
                f"Light processing of file {record.file_id} exceeded its budget"
            )
        try:
            future.result()
        except Exception as exc:
            self._transitions.fail(record.file_id, record.upload_date, str(exc))
            raise InlineProcessingError(
                f"Light processing failed for file {record.file_id}: {exc}"
            ) from exc

        outcome = self._transitions.advance(
            record.file_id, record.upload_date, FileStatus.PROCESSING, FileStatus.COMPLETED
        )
        if outcome is not UpdateOutcome.APPLIED:
            Log.warning(f"File {record.file_id} finished inline but was not COMPLETED: {outcome.value}")
