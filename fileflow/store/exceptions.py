class StatusStoreError(Exception):
    """Raised when the status store cannot be read or written."""


class InvalidStatusTransitionError(StatusStoreError):
    """Raised when a status change would break the UPLOADED -> PROCESSING -> terminal order."""
