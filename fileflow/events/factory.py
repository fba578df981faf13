from fileflow.config.settings import Settings
from fileflow.events.base import BaseEventStream
from fileflow.events.postgres_stream import PostgresEventStream
from fileflow.store.base import BaseStatusStore
from fileflow.store.memory_store import InMemoryStatusStore


class EventStreamFactory:
    """Creates the change stream that belongs to the configured status store."""

    @classmethod
    def create(cls, settings: Settings, store: BaseStatusStore) -> BaseEventStream:
        backend = settings.status_store_backend.lower()
        if backend == "memory":
            if not isinstance(store, InMemoryStatusStore):
                raise ValueError("The memory event stream requires InMemoryStatusStore")
            return store.events
        if backend == "postgres":
            return PostgresEventStream(
                max_attempts=settings.max_event_attempts,
                visibility_timeout_seconds=settings.event_visibility_timeout_seconds,
            )
        raise ValueError(
            f"Unknown status store backend '{backend}'. Choose from: ['postgres', 'memory']"
        )
