import time
from concurrent.futures import ThreadPoolExecutor

from fileflow.config.settings import Settings
from fileflow.consumer.event_runner import EventRunner
from fileflow.events.base import BaseEventStream
from fileflow.events.models import ChangeEvent
from fileflow.logging.logger import Log
from fileflow.reconciliation.reconciler import Reconciler


class EventConsumer:
    """Poll loop: claim a batch -> run events concurrently -> sweep on schedule."""

    def __init__(
        self,
        stream: BaseEventStream,
        event_runner: EventRunner,
        reconciler: Reconciler,
        settings: Settings,
    ) -> None:
        self._stream = stream
        self._event_runner = event_runner
        self._reconciler = reconciler
        self._settings = settings
        self._last_sweep: float | None = None

    def run(self, max_batches: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_batches is set, stop after handling that many non-empty
        batches (for testing).
        """
        Log.info("Event consumer started, polling for change events")
        batches_done = 0
        with ThreadPoolExecutor(
            max_workers=self._settings.max_concurrent_events,
            thread_name_prefix="fileflow-event",
        ) as pool:
            try:
                while max_batches is None or batches_done < max_batches:
                    self._maybe_reconcile()
                    events = self._try_poll()
                    if events:
                        list(pool.map(self._run_safely, events))
                        batches_done += 1
                    else:
                        Log.debug("No events available, sleeping")
                        time.sleep(self._settings.event_poll_interval_seconds)
            except KeyboardInterrupt:
                Log.info("Event consumer shutting down gracefully")

    def _run_safely(self, event: ChangeEvent) -> None:
        try:
            self._event_runner.run(event)
        except Exception as exc:
            Log.exception(f"Event {event.event_id} could not be settled: {exc}")

    def _try_poll(self) -> list[ChangeEvent]:
        """Claim the next batch. Stream errors are logged and retried next tick."""
        try:
            return self._stream.poll(self._settings.event_batch_size)
        except Exception as exc:
            Log.warning(f"Event stream error, will retry: {exc}")
            return []

    def _maybe_reconcile(self) -> None:
        now = time.monotonic()
        if (
            self._last_sweep is not None
            and now - self._last_sweep < self._settings.reconcile_interval_seconds
        ):
            return
        self._last_sweep = now
        try:
            self._reconciler.sweep()
        except Exception as exc:
            Log.warning(f"Reconciliation sweep failed, will retry: {exc}")
