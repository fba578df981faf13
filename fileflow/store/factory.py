from fileflow.config.settings import Settings
from fileflow.store.base import BaseStatusStore
from fileflow.store.memory_store import InMemoryStatusStore
from fileflow.store.postgres_store import PostgresStatusStore


class StatusStoreFactory:
    """Creates the status store selected by settings."""

    BACKENDS: dict[str, type[BaseStatusStore]] = {
        "postgres": PostgresStatusStore,
        "memory": InMemoryStatusStore,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseStatusStore:
        backend = settings.status_store_backend.lower()
        store_cls = cls.BACKENDS.get(backend)
        if store_cls is None:
            raise ValueError(
                f"Unknown status store backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
            )
        return store_cls()
