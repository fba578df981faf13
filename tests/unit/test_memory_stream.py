from fileflow.events.memory_stream import InMemoryEventStream
from fileflow.events.models import EventType


def _publish(stream: InMemoryEventStream, file_id: str, status: str = "UPLOADED") -> None:
    stream.publish(EventType.MODIFY, {"fileId": file_id, "status": status})


class TestPoll:
    def test_respects_limit(self) -> None:
        stream = InMemoryEventStream()
        for i in range(3):
            _publish(stream, f"f{i}")
        assert len(stream.poll(2)) == 2

    def test_holds_back_later_events_for_same_file(self) -> None:
        stream = InMemoryEventStream()
        _publish(stream, "f1", "UPLOADED")
        _publish(stream, "f1", "PROCESSING")
        _publish(stream, "f2", "UPLOADED")

        first = stream.poll(10)
        assert [(e.file_id, e.new_status) for e in first] == [
            ("f1", "UPLOADED"),
            ("f2", "UPLOADED"),
        ]
        assert stream.poll(10) == []

        stream.ack(first[0])
        [second] = stream.poll(10)
        assert (second.file_id, second.new_status) == ("f1", "PROCESSING")


class TestSettle:
    def test_release_redelivers_with_incremented_attempts(self) -> None:
        stream = InMemoryEventStream()
        _publish(stream, "f1")
        [event] = stream.poll(1)

        stream.release(event, "boom")

        [again] = stream.poll(1)
        assert again.event_id == event.event_id
        assert again.attempts == 1

    def test_discard_moves_to_dead_letters(self) -> None:
        stream = InMemoryEventStream()
        _publish(stream, "f1")
        [event] = stream.poll(1)

        stream.discard(event, "boom")

        assert stream.poll(1) == []
        assert [(e.event_id, err) for e, err in stream.dead_letters] == [(event.event_id, "boom")]
        assert stream.backlog == 0
