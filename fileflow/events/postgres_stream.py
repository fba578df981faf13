import psycopg
from psycopg.rows import dict_row

from fileflow.database.connection import get_connection
from fileflow.events.base import BaseEventStream
from fileflow.events.exceptions import EventStreamError
from fileflow.events.models import ChangeEvent, EventType


class PostgresEventStream(BaseEventStream):
    """Change feed over the file_change_events outbox table.

    Only the oldest open event of each file is claimable, which keeps the
    per-file order. Claimed rows stay locked (``locked_at``) for the
    visibility timeout; a crashed consumer's events become claimable again
    after it lapses.
    """

    def __init__(self, max_attempts: int, visibility_timeout_seconds: int) -> None:
        self._max_attempts = max_attempts
        self._visibility_timeout_seconds = visibility_timeout_seconds

    def poll(self, limit: int) -> list[ChangeEvent]:
        """Claim the next open events using SELECT FOR UPDATE SKIP LOCKED."""
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT e.id, e.event_type, e.new_image, e.old_image, e.attempts
                        FROM file_change_events e
                        WHERE e.acked_at IS NULL
                          AND e.failed_at IS NULL
                          AND e.attempts < %s
                          AND (e.locked_at IS NULL
                               OR e.locked_at < NOW() - %s * INTERVAL '1 second')
                          AND NOT EXISTS (
                              SELECT 1 FROM file_change_events p
                              WHERE p.file_id = e.file_id
                                AND p.id < e.id
                                AND p.acked_at IS NULL
                                AND p.failed_at IS NULL
                          )
                        ORDER BY e.id
                        LIMIT %s
                        FOR UPDATE SKIP LOCKED
                        """,
                        (self._max_attempts, self._visibility_timeout_seconds, limit),
                    )
                    rows = cur.fetchall()
                    if rows:
                        cur.execute(
                            """
                            UPDATE file_change_events
                            SET locked_at = NOW()
                            WHERE id = ANY(%s)
                            """,
                            ([row["id"] for row in rows],),
                        )
                conn.commit()
        except psycopg.Error as exc:
            raise EventStreamError(f"Failed to poll change events: {exc}") from exc

        return [
            ChangeEvent(
                event_id=str(row["id"]),
                event_type=EventType(row["event_type"]),
                new_image=row["new_image"],
                old_image=row["old_image"],
                attempts=row["attempts"],
            )
            for row in rows
        ]

    def ack(self, event: ChangeEvent) -> None:
        self._execute(
            """
            UPDATE file_change_events
            SET acked_at = NOW(), locked_at = NULL
            WHERE id = %s
            """,
            (int(event.event_id),),
        )

    def release(self, event: ChangeEvent, error: str) -> None:
        """Increment attempts and return the event to the open set."""
        self._execute(
            """
            UPDATE file_change_events
            SET attempts = attempts + 1, locked_at = NULL, error_message = %s
            WHERE id = %s
            """,
            (error, int(event.event_id)),
        )

    def discard(self, event: ChangeEvent, error: str) -> None:
        self._execute(
            """
            UPDATE file_change_events
            SET attempts = attempts + 1, locked_at = NULL,
                failed_at = NOW(), error_message = %s
            WHERE id = %s
            """,
            (error, int(event.event_id)),
        )

    @staticmethod
    def _execute(query: str, params: tuple[object, ...]) -> None:
        try:
            with get_connection() as conn:
                conn.execute(query, params)
                conn.commit()
        except psycopg.Error as exc:
            raise EventStreamError(f"Failed to update change event: {exc}") from exc
