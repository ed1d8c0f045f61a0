"""
In-process single-flight scheduler.

At most one reconciliation cycle runs at a time. A trigger that arrives while
a cycle is active is dropped with a warning; triggers are never queued.
"""
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

from catalog_sync.constants.sync import SyncMode
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.models.sync_models import CycleReport

logger = logging.getLogger(__name__)


class SyncScheduler:

    def __init__(self, cycle, interval_minutes: float = 10, reporter: Optional[SyncReporter] = None):
        self.cycle = cycle
        self.interval_minutes = interval_minutes
        self.reporter = reporter or cycle.reporter
        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._next_run_at: Optional[datetime] = None
        self._last_report: Optional[CycleReport] = None

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60

    @property
    def is_running(self) -> bool:
        """True while a cycle is executing."""
        return self._cycle_lock.locked()

    @property
    def is_started(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def next_run_at(self) -> Optional[datetime]:
        return self._next_run_at

    @property
    def last_report(self) -> Optional[CycleReport]:
        return self._last_report

    def trigger(self, trigger: str = SyncMode.MANUAL) -> Optional[CycleReport]:
        """
        Run one cycle in the calling thread.

        Returns:
            The cycle report, or None when another cycle is already running
        """
        if not self._cycle_lock.acquire(blocking=False):
            self.reporter.warning("An update is already running!", trigger=trigger)
            return None
        try:
            if trigger == SyncMode.MANUAL:
                logger.info("Force updating")
            report = self.cycle.run(trigger)
            self._last_report = report
            return report
        finally:
            self._cycle_lock.release()

    def start(self) -> None:
        """Start the periodic timer thread."""
        if self.is_started:
            logger.warning("Scheduler already started")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="catalog-sync-timer", daemon=True)
        self._thread.start()
        logger.info(f"Scheduler started, interval {self.interval_minutes} minutes")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None
        self._next_run_at = None
        logger.info("Scheduler stopped")

    def _loop(self) -> None:
        while True:
            # The wait starts after the previous cycle has finished
            self._next_run_at = datetime.now(timezone.utc) + timedelta(seconds=self.interval_seconds)
            if self._stop_event.wait(self.interval_seconds):
                return
            try:
                report = self.trigger(SyncMode.SCHEDULED)
            except Exception as e:
                logger.exception(f"Scheduled cycle failed: {e}")
                continue
            if report is not None:
                next_run = datetime.now(timezone.utc) + timedelta(seconds=self.interval_seconds)
                logger.info(f"Update finished! Next update at {next_run:%Y.%m.%d %H:%M:%S}")
