from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from fileflow.config.settings import Settings

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

_pool: ConnectionPool | None = None


def init_pool(settings: Settings) -> None:
    """Open the process-wide connection pool used by the PostgreSQL adapters."""
    global _pool  # noqa: PLW0603
    conninfo = (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )
    # Sized for the event thread pool plus the reconciliation sweep.
    _pool = ConnectionPool(
        conninfo, min_size=1, max_size=max(2, settings.max_concurrent_events + 2)
    )


def close_pool() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn


def apply_schema(conn: psycopg.Connection[Any]) -> None:
    """Create the file_records and file_change_events tables if missing."""
    conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
    conn.commit()
