from abc import ABC, abstractmethod


class BaseWorkerProvisioner(ABC):
    """Contract for the external service that starts heavy-processing workers."""

    @abstractmethod
    def launch(self, file_id: str) -> str:
        """Start one worker for ``file_id`` and return its worker id.

        Raises:
            WorkerLaunchTimeoutError: if the provider does not answer in time.
            WorkerLaunchError: on any other provisioning failure.
        """
