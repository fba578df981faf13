from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from fileflow.files.models import FileRecord, utcnow
from fileflow.logging.logger import Log
from fileflow.store.base import BaseStatusStore
from fileflow.workers.launcher import WorkerPoolLauncher
from fileflow.workers.models import WorkerHandle


@dataclass
class ReconciliationReport:
    """What one sweep found."""

    expired_workers: list[WorkerHandle] = field(default_factory=list)
    unassigned_files: list[FileRecord] = field(default_factory=list)


class Reconciler:
    """Scheduled sweep over worker handles and stale PROCESSING files.

    Reports files stuck in PROCESSING with no tracked worker: capacity
    rejections, failed launches, expired workers and overrun inline work all
    end up here. Nothing is requeued automatically.
    """

    def __init__(
        self,
        store: BaseStatusStore,
        launcher: WorkerPoolLauncher,
        stale_after_seconds: int,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._launcher = launcher
        self._stale_after = timedelta(seconds=stale_after_seconds)
        self._clock = clock

    def sweep(self, now: datetime | None = None) -> ReconciliationReport:
        now = now or self._clock()
        report = ReconciliationReport(expired_workers=self._launcher.expire_stale(now))

        tracked = self._launcher.tracked_file_ids()
        for record in self._store.list_processing(updated_before=now - self._stale_after):
            if record.file_id in tracked:
                continue
            report.unassigned_files.append(record)
            Log.warning(
                f"File {record.file_id} stuck in PROCESSING since "
                f"{record.updated_at} with no worker assigned"
            )

        Log.info(
            f"Reconciliation sweep: {len(report.expired_workers)} workers expired, "
            f"{len(report.unassigned_files)} files awaiting reconciliation"
        )
        return report
