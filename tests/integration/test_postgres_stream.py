import pytest

from fileflow.events.models import EventType
from fileflow.events.postgres_stream import PostgresEventStream
from fileflow.files.models import FileStatus
from fileflow.store.postgres_store import PostgresStatusStore


def _stream() -> PostgresEventStream:
    return PostgresEventStream(max_attempts=3, visibility_timeout_seconds=60)


@pytest.mark.integration
class TestPostgresEventStreamPoll:
    def test_poll_claims_insert_event(self, make_upload, clear_open_events) -> None:
        store = PostgresStatusStore()
        record = make_upload()
        store.insert(record)
        stream = _stream()

        [event] = stream.poll(10)

        assert event.event_type is EventType.INSERT
        assert event.file_id == record.file_id
        assert event.attempts == 0
        assert stream.poll(10) == []

    def test_poll_keeps_per_file_order(self, make_upload, clear_open_events) -> None:
        store = PostgresStatusStore()
        record = make_upload()
        store.insert(record)
        store.conditional_update_status(
            record.file_id, record.upload_date, FileStatus.UPLOADED, FileStatus.PROCESSING
        )
        stream = _stream()

        [first] = stream.poll(10)
        assert first.event_type is EventType.INSERT
        stream.ack(first)

        [second] = stream.poll(10)
        assert second.event_type is EventType.MODIFY
        assert second.old_status == "UPLOADED"


@pytest.mark.integration
class TestPostgresEventStreamSettle:
    def test_release_redelivers_with_attempt_count(self, make_upload, clear_open_events) -> None:
        PostgresStatusStore().insert(make_upload())
        stream = _stream()
        [event] = stream.poll(10)

        stream.release(event, "boom")

        [again] = stream.poll(10)
        assert again.event_id == event.event_id
        assert again.attempts == 1

    def test_discard_is_never_redelivered(self, make_upload, clear_open_events) -> None:
        PostgresStatusStore().insert(make_upload())
        stream = _stream()
        [event] = stream.poll(10)

        stream.discard(event, "boom")

        assert stream.poll(10) == []
