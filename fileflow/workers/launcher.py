import threading
from collections import OrderedDict
from collections.abc import Callable
from datetime import datetime, timedelta

from fileflow.files.models import FileStatus, utcnow
from fileflow.logging.logger import Log
from fileflow.store.base import BaseStatusStore, UpdateOutcome
from fileflow.store.transitions import StatusTransitions
from fileflow.workers.exceptions import WorkerLaunchError
from fileflow.workers.models import WorkerHandle
from fileflow.workers.provisioner_base import BaseWorkerProvisioner

# Expired handles remembered for late completion signals.
EXPIRED_HANDLE_HISTORY = 1000


class WorkerPoolLauncher:
    """Launches heavy-processing workers and bounds how many run at once.

    The capacity check reserves a slot under the lock; the provisioning call
    then runs outside it. Tracked handles plus reserved slots never exceed
    ``max_workers``, however many dispatches race.
    """

    def __init__(
        self,
        provisioner: BaseWorkerProvisioner,
        store: BaseStatusStore,
        transitions: StatusTransitions,
        *,
        max_workers: int,
        safety_timeout_seconds: int,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self._provisioner = provisioner
        self._store = store
        self._transitions = transitions
        self._max_workers = max_workers
        self._safety_timeout = timedelta(seconds=safety_timeout_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._handles: dict[str, WorkerHandle] = {}
        self._reserved = 0
        self._expired: OrderedDict[str, WorkerHandle] = OrderedDict()

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._handles)

    def tracked_file_ids(self) -> set[str]:
        with self._lock:
            return {handle.file_id for handle in self._handles.values()}

    def handles(self) -> list[WorkerHandle]:
        with self._lock:
            return list(self._handles.values())

    def dispatch(self, file_id: str) -> WorkerHandle | None:
        """Launch a worker for ``file_id`` if a slot is free.

        Returns:
            The new handle, or None when the pool is at capacity. The file is
            then left PROCESSING with no worker for reconciliation to report.

        Raises:
            WorkerLaunchError: if provisioning fails. The slot is freed and
                the file stays PROCESSING; no retry is attempted here.
        """
        with self._lock:
            in_use = len(self._handles) + self._reserved
            if in_use >= self._max_workers:
                Log.warning(
                    f"Worker pool at capacity ({in_use}/{self._max_workers}), "
                    f"file {file_id} left PROCESSING without a worker"
                )
                return None
            self._reserved += 1

        try:
            worker_id = self._provisioner.launch(file_id)
        except WorkerLaunchError as exc:
            self._release_reservation()
            Log.error(f"Worker launch failed for file {file_id}: {exc}")
            raise
        except Exception as exc:
            self._release_reservation()
            Log.error(f"Worker launch failed for file {file_id}: {exc}")
            raise WorkerLaunchError(f"Worker launch failed for file {file_id}: {exc}") from exc

        handle = WorkerHandle(worker_id=worker_id, file_id=file_id, launched_at=self._clock())
        with self._lock:
            self._reserved -= 1
            self._handles[worker_id] = handle
        Log.info(f"Launched worker {worker_id} for file {file_id}")
        return handle

    def complete(self, worker_id: str, error: str | None = None) -> UpdateOutcome | None:
        """Handle a worker's completion signal.

        Stops tracking the worker and moves its file PROCESSING -> COMPLETED,
        or PROCESSING -> ERROR when ``error`` is given. Workers already
        expired by the safety timeout still settle their file; the conditional
        update keeps a late signal from overwriting a newer status. Returns
        None for unknown workers.
        """
        with self._lock:
            handle = self._handles.pop(worker_id, None)
            late = handle is None
            if late:
                handle = self._expired.pop(worker_id, None)
        if handle is None:
            Log.warning(f"Completion signal from unknown worker {worker_id} ignored")
            return None
        if late:
            Log.warning(
                f"Late completion signal from worker {worker_id} for file {handle.file_id}, "
                f"received after the safety timeout"
            )

        record = self._store.get(handle.file_id)
        if record is None:
            Log.warning(f"Worker {worker_id} finished file {handle.file_id}, which no longer exists")
            return UpdateOutcome.NOT_FOUND

        if error is not None:
            return self._transitions.fail(
                record.file_id, record.upload_date, f"worker {worker_id}: {error}"
            )
        return self._transitions.advance(
            record.file_id, record.upload_date, FileStatus.PROCESSING, FileStatus.COMPLETED
        )

    def expire_stale(self, now: datetime | None = None) -> list[WorkerHandle]:
        """Stop tracking workers launched longer ago than the safety timeout."""
        cutoff = (now or self._clock()) - self._safety_timeout
        with self._lock:
            expired = [h for h in self._handles.values() if h.launched_at <= cutoff]
            for handle in expired:
                del self._handles[handle.worker_id]
                self._expired[handle.worker_id] = handle
            while len(self._expired) > EXPIRED_HANDLE_HISTORY:
                self._expired.popitem(last=False)
        for handle in expired:
            Log.warning(
                f"Worker {handle.worker_id} for file {handle.file_id} "
                f"expired without a completion signal"
            )
        return expired

    def _release_reservation(self) -> None:
        with self._lock:
            self._reserved -= 1
