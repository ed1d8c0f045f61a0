"""
Standalone runner: one process, no broker.

Runs a cycle at startup and then keeps the in-process timer going until
SIGINT or SIGTERM. Deployments with Celery use the beat schedule instead.
"""
import logging
import signal
import threading

from catalog_sync.constants.sync import SyncMode
from catalog_sync.core.logging_config import configure_logging
from catalog_sync.factories.engine_factory import get_sync_scheduler
from catalog_sync.tasks.scheduler import SyncScheduler

logger = logging.getLogger(__name__)


def run(scheduler: SyncScheduler, stop_event: threading.Event) -> None:
    try:
        scheduler.trigger(SyncMode.SCHEDULED)
    except Exception as e:
        logger.exception(f"Initial cycle failed: {e}")

    scheduler.start()
    try:
        stop_event.wait()
    finally:
        scheduler.stop()


def main() -> None:
    configure_logging()
    stop_event = threading.Event()

    def _shutdown(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_event.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    run(get_sync_scheduler(), stop_event)


if __name__ == "__main__":
    main()
