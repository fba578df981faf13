from fileflow.config.settings import Settings
from fileflow.consumer.consumer import EventConsumer
from fileflow.consumer.event_runner import EventRunner
from fileflow.database.connection import close_pool, init_pool
from fileflow.dispatch.dispatcher import Dispatcher
from fileflow.dispatch.inline_processor import InlineProcessor, SimulatedLightTask
from fileflow.events.factory import EventStreamFactory
from fileflow.logging.logger import Log
from fileflow.notifications.factory import NotifierFactory
from fileflow.notifications.trigger import NotificationTrigger
from fileflow.reconciliation.reconciler import Reconciler
from fileflow.store.base import BaseStatusStore
from fileflow.store.factory import StatusStoreFactory
from fileflow.store.transitions import StatusTransitions
from fileflow.workers.factory import WorkerProvisionerFactory
from fileflow.workers.launcher import WorkerPoolLauncher


def build_consumer(settings: Settings, store: BaseStatusStore | None = None) -> EventConsumer:
    """Wire store, stream, handlers and reconciler into a ready consumer."""
    store = store or StatusStoreFactory.create(settings)
    stream = EventStreamFactory.create(settings, store)
    transitions = StatusTransitions(store)

    launcher = WorkerPoolLauncher(
        WorkerProvisionerFactory.create(settings),
        store,
        transitions,
        max_workers=settings.max_workers,
        safety_timeout_seconds=settings.worker_safety_timeout_seconds,
    )
    inline_processor = InlineProcessor(
        transitions,
        SimulatedLightTask(settings.light_processing_delay_seconds),
        budget_seconds=settings.light_processing_budget_seconds,
    )
    dispatcher = Dispatcher(transitions, launcher, inline_processor)
    notification_trigger = NotificationTrigger(NotifierFactory.create(settings))

    event_runner = EventRunner([dispatcher, notification_trigger], stream, settings)
    reconciler = Reconciler(store, launcher, settings.processing_stale_after_seconds)
    return EventConsumer(stream, event_runner, reconciler, settings)


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start consumer loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    uses_postgres = settings.status_store_backend.lower() == "postgres"
    if uses_postgres:
        init_pool(settings)

    try:
        build_consumer(settings).run()
    finally:
        if uses_postgres:
            close_pool()


if __name__ == "__main__":
    main()
