import os
import uuid
from collections.abc import Generator

import pytest

from fileflow.config.settings import Settings
from fileflow.database.connection import apply_schema, close_pool, get_connection, init_pool
from fileflow.files.models import FileRecord


def _test_settings() -> Settings:
    return Settings(db_database=os.environ.get("DB_DATABASE", "fileflow_test"))


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            apply_schema(conn)
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def file_id_prefix(integration_pool: None) -> Generator[str, None, None]:
    """Unique prefix for this test's file ids; rows are deleted afterwards."""
    prefix = f"it-{uuid.uuid4().hex[:8]}-"
    yield prefix
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM file_change_events WHERE file_id LIKE %s", (prefix + "%",))
            cur.execute("DELETE FROM file_records WHERE file_id LIKE %s", (prefix + "%",))
        conn.commit()


@pytest.fixture
def make_upload(file_id_prefix: str):
    def _make(name: str = "a", file_size: int = 1000) -> FileRecord:
        return FileRecord.new_upload(
            file_id=file_id_prefix + name,
            user_id="user-1",
            file_name=f"{name}.bin",
            file_type="application/octet-stream",
            file_size=file_size,
        )

    return _make


@pytest.fixture
def clear_open_events(integration_pool: None) -> None:
    """Settle events left open by other runs so polls only see this test's events."""
    with get_connection() as conn:
        conn.execute(
            "UPDATE file_change_events SET acked_at = NOW() "
            "WHERE acked_at IS NULL AND failed_at IS NULL"
        )
        conn.commit()
