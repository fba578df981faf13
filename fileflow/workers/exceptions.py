class WorkerLaunchError(Exception):
    """Raised when a heavy-processing worker could not be provisioned."""


class WorkerLaunchTimeoutError(WorkerLaunchError):
    """Raised when the provisioning call does not answer within its timeout."""
