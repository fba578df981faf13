class DispatchError(Exception):
    """Base exception for dispatch-related errors."""


class ClassificationError(DispatchError):
    """Raised when a file's size or processing tier is missing or invalid."""


class InlineProcessingError(DispatchError):
    """Raised when light processing fails. The file has been moved to ERROR."""


class LightProcessingTimeoutError(DispatchError):
    """Raised when light processing overruns its budget. The file stays PROCESSING."""
