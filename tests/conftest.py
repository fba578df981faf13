import pytest

from fileflow.store.memory_store import InMemoryStatusStore
from fileflow.store.transitions import StatusTransitions


@pytest.fixture()
def store() -> InMemoryStatusStore:
    return InMemoryStatusStore()


@pytest.fixture()
def transitions(store: InMemoryStatusStore) -> StatusTransitions:
    return StatusTransitions(store)
