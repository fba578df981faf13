from datetime import datetime
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from fileflow.database.connection import get_connection
from fileflow.events.models import EventType
from fileflow.files.models import FileRecord, FileStatus, ProcessingTier
from fileflow.store.base import BaseStatusStore, UpdateOutcome
from fileflow.store.exceptions import StatusStoreError

_COLUMNS = """
    file_id, upload_date, user_id, file_name, file_type, file_size,
    status, processing_tier, updated_at
"""


class PostgresStatusStore(BaseStatusStore):
    """Status store over the file_records table.

    Status writes append to file_change_events in the same transaction, so the
    change feed never disagrees with the table.
    """

    def get(self, file_id: str) -> FileRecord | None:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_COLUMNS}
                        FROM file_records
                        WHERE file_id = %s
                        ORDER BY upload_date DESC
                        LIMIT 1
                        """,
                        (file_id,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise StatusStoreError(f"Failed to read file {file_id}: {exc}") from exc

        if row is None:
            return None
        return _row_to_record(row)

    def insert(self, record: FileRecord) -> None:
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO file_records
                        (file_id, upload_date, user_id, file_name, file_type,
                         file_size, status, processing_tier, updated_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, NOW())
                        """,
                        (
                            record.file_id,
                            record.upload_date,
                            record.user_id,
                            record.file_name,
                            record.file_type,
                            record.file_size,
                            record.status.value,
                            record.processing_tier.value if record.processing_tier else None,
                        ),
                    )
                    _append_event(cur, record.file_id, EventType.INSERT, record.to_image())
                conn.commit()
        except psycopg.Error as exc:
            raise StatusStoreError(f"Failed to insert file {record.file_id}: {exc}") from exc

    def conditional_update_status(
        self,
        file_id: str,
        upload_date: datetime,
        expected: FileStatus,
        new_status: FileStatus,
    ) -> UpdateOutcome:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_COLUMNS}
                        FROM file_records
                        WHERE file_id = %s AND upload_date = %s
                        FOR UPDATE
                        """,
                        (file_id, upload_date),
                    )
                    current = cur.fetchone()
                    if current is None:
                        conn.rollback()
                        return UpdateOutcome.NOT_FOUND
                    if current["status"] != expected.value:
                        conn.rollback()
                        return UpdateOutcome.PRECONDITION_FAILED

                    cur.execute(
                        f"""
                        UPDATE file_records
                        SET status = %s, updated_at = NOW()
                        WHERE file_id = %s AND upload_date = %s
                        RETURNING {_COLUMNS}
                        """,
                        (new_status.value, file_id, upload_date),
                    )
                    updated = cur.fetchone()
                    if updated is None:
                        conn.rollback()
                        raise StatusStoreError(
                            f"File {file_id} vanished while its status was being updated"
                        )
                    _append_event(
                        cur,
                        file_id,
                        EventType.MODIFY,
                        _row_to_record(updated).to_image(),
                        _row_to_record(current).to_image(),
                    )
                conn.commit()
        except psycopg.Error as exc:
            raise StatusStoreError(
                f"Failed to update status of file {file_id}: {exc}"
            ) from exc
        return UpdateOutcome.APPLIED

    def list_processing(self, updated_before: datetime) -> list[FileRecord]:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_COLUMNS}
                        FROM file_records
                        WHERE status = 'PROCESSING' AND updated_at < %s
                        ORDER BY updated_at
                        """,
                        (updated_before,),
                    )
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise StatusStoreError(f"Failed to list processing files: {exc}") from exc
        return [_row_to_record(row) for row in rows]


def _append_event(
    cur: psycopg.Cursor[Any],
    file_id: str,
    event_type: EventType,
    new_image: dict[str, Any],
    old_image: dict[str, Any] | None = None,
) -> None:
    cur.execute(
        """
        INSERT INTO file_change_events (file_id, event_type, new_image, old_image)
        VALUES (%s, %s, %s, %s)
        """,
        (
            file_id,
            event_type.value,
            Jsonb(new_image),
            Jsonb(old_image) if old_image is not None else None,
        ),
    )


def _row_to_record(row: dict[str, Any]) -> FileRecord:
    return FileRecord(
        file_id=row["file_id"],
        upload_date=row["upload_date"],
        user_id=row["user_id"],
        file_name=row["file_name"],
        file_type=row["file_type"],
        file_size=row["file_size"],
        status=FileStatus(row["status"]),
        processing_tier=(
            ProcessingTier(row["processing_tier"]) if row["processing_tier"] else None
        ),
        updated_at=row["updated_at"],
    )
