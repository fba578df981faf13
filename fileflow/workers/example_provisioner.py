"""Example worker provisioner.

Use this module as a reference when adding a real provisioning backend.
Implement BaseWorkerProvisioner and register it in WorkerProvisionerFactory.
"""

import uuid

from fileflow.logging.logger import Log
from fileflow.workers.provisioner_base import BaseWorkerProvisioner


class ExampleWorkerProvisioner(BaseWorkerProvisioner):
    """Returns synthetic worker ids without starting anything.

    Useful for local development and tests; nothing ever signals completion,
    so handles are only released by the reconciliation sweep.
    """

    def launch(self, file_id: str) -> str:
        worker_id = f"example-{uuid.uuid4().hex[:12]}"
        Log.info(f"Example provisioner assigned worker {worker_id} to file {file_id}")
        return worker_id
