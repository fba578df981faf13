from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WorkerHandle:
    """A launched heavy-processing worker the launcher is still tracking."""

    worker_id: str
    file_id: str
    launched_at: datetime
