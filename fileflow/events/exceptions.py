class EventStreamError(Exception):
    """Raised when the change-event stream cannot be read or updated."""


class InvalidEventError(EventStreamError):
    """Raised when a change event or its record image is malformed."""
