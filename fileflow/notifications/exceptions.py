class NotificationDeliveryError(Exception):
    """Raised when a completion notification could not be delivered."""
