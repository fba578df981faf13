from unittest.mock import MagicMock, patch

import psycopg
import pytest

from fileflow.files.models import FileStatus
from fileflow.store.base import UpdateOutcome
from fileflow.store.exceptions import StatusStoreError
from fileflow.store.postgres_store import PostgresStatusStore
from tests.helpers import UPLOAD_DATE


def _row(status: str) -> dict:
    return {
        "file_id": "file-1",
        "upload_date": UPLOAD_DATE,
        "user_id": "user-1",
        "file_name": "report.pdf",
        "file_type": "application/pdf",
        "file_size": 1000,
        "status": status,
        "processing_tier": "LIGHT",
        "updated_at": UPLOAD_DATE,
    }


def _patched_connection(fetched: list[dict | None]) -> tuple[MagicMock, MagicMock]:
    conn = MagicMock()
    cur = conn.cursor.return_value.__enter__.return_value
    cur.fetchone.side_effect = fetched
    get_connection = MagicMock()
    get_connection.return_value.__enter__.return_value = conn
    return get_connection, conn


class TestConditionalUpdateStatus:
    def test_precondition_failed_rolls_back(self) -> None:
        get_connection, conn = _patched_connection([_row("PROCESSING")])

        with patch("fileflow.store.postgres_store.get_connection", get_connection):
            outcome = PostgresStatusStore().conditional_update_status(
                "file-1", UPLOAD_DATE, FileStatus.UPLOADED, FileStatus.PROCESSING
            )

        assert outcome is UpdateOutcome.PRECONDITION_FAILED
        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()

    def test_row_missing_after_update_raises_store_error(self) -> None:
        get_connection, conn = _patched_connection([_row("UPLOADED"), None])

        with patch("fileflow.store.postgres_store.get_connection", get_connection):
            with pytest.raises(StatusStoreError, match="vanished"):
                PostgresStatusStore().conditional_update_status(
                    "file-1", UPLOAD_DATE, FileStatus.UPLOADED, FileStatus.PROCESSING
                )

        conn.rollback.assert_called_once()
        conn.commit.assert_not_called()

    def test_driver_error_is_wrapped(self) -> None:
        get_connection = MagicMock(side_effect=psycopg.OperationalError("connection lost"))

        with patch("fileflow.store.postgres_store.get_connection", get_connection):
            with pytest.raises(StatusStoreError, match="connection lost"):
                PostgresStatusStore().conditional_update_status(
                    "file-1", UPLOAD_DATE, FileStatus.UPLOADED, FileStatus.PROCESSING
                )
