from abc import ABC, abstractmethod

from fileflow.events.models import ChangeEvent


class BaseEventStream(ABC):
    """Contract for at-least-once change-event sources.

    Events for one file are handed out in the order they were written; events
    for different files carry no ordering guarantee.
    """

    @abstractmethod
    def poll(self, limit: int) -> list[ChangeEvent]:
        """Claim up to ``limit`` undelivered events.

        Claimed events are invisible to other pollers until acknowledged,
        released, discarded, or their visibility window lapses.

        Raises:
            EventStreamError: if the stream cannot be read.
        """

    @abstractmethod
    def ack(self, event: ChangeEvent) -> None:
        """Mark an event as handled. It is never delivered again."""

    @abstractmethod
    def release(self, event: ChangeEvent, error: str) -> None:
        """Return a failed event to the stream for redelivery."""

    @abstractmethod
    def discard(self, event: ChangeEvent, error: str) -> None:
        """Dead-letter an event that exhausted its delivery attempts."""


class BaseEventHandler(ABC):
    """Contract for components triggered by change events."""

    name: str = "handler"

    @abstractmethod
    def on_event(self, event: ChangeEvent) -> object:
        """Handle one delivery. Raise to have the event redelivered."""
