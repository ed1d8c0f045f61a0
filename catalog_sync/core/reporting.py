"""
Structured reporting channel shared by every component of the engine.

Components never log faults directly; they hand them to a SyncReporter,
which turns them into ReportRecord objects and passes each record to its
sinks (the logging sink, the alert sink, and per-cycle capture lists).
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional

from pydantic import BaseModel, Field

from catalog_sync.constants.sync import ReportLevel
from catalog_sync.core.exceptions import SyncFault

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ReportLevel.INFO: logging.INFO,
    ReportLevel.WARNING: logging.WARNING,
    ReportLevel.ERROR: logging.ERROR,
    ReportLevel.CRITICAL: logging.CRITICAL,
}


class ReportRecord(BaseModel):
    """One entry emitted on the reporting channel."""
    level: str
    message: str
    fault: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


Sink = Callable[[ReportRecord], None]


def logging_sink(record: ReportRecord) -> None:
    """Write a record to the module logger."""
    prefix = f"[{record.fault}] " if record.fault else ""
    suffix = ""
    if record.context:
        suffix = " | " + ", ".join(f"{k}={v}" for k, v in record.context.items())
    logger.log(_LOG_LEVELS.get(record.level, logging.INFO), f"{prefix}{record.message}{suffix}")


class AlertSink:
    """Forward error and critical records to an AlertManager without blocking."""

    forwarded_levels = (ReportLevel.ERROR, ReportLevel.CRITICAL)

    def __init__(self, alert_manager):
        self.alert_manager = alert_manager

    def __call__(self, record: ReportRecord) -> None:
        if record.level not in self.forwarded_levels:
            return
        thread = threading.Thread(
            target=self.alert_manager.send_alert,
            kwargs={
                "title": record.fault or "Catalog sync",
                "message": record.message,
                "level": record.level,
                "context": record.context,
            },
            daemon=True,
        )
        thread.start()


class SyncReporter:
    """Fan report records out to the registered sinks."""

    def __init__(self, sinks: Optional[List[Sink]] = None, alert_manager=None):
        self._sinks: List[Sink] = list(sinks) if sinks is not None else [logging_sink]
        self._lock = threading.Lock()
        if alert_manager is not None:
            self._sinks.append(AlertSink(alert_manager))

    def add_sink(self, sink: Sink) -> None:
        with self._lock:
            self._sinks.append(sink)

    def remove_sink(self, sink: Sink) -> None:
        with self._lock:
            if sink in self._sinks:
                self._sinks.remove(sink)

    def emit(self, record: ReportRecord) -> ReportRecord:
        with self._lock:
            sinks = list(self._sinks)
        for sink in sinks:
            try:
                sink(record)
            except Exception as e:
                # Reporting must never break the pipeline
                logger.error(f"Report sink {sink!r} failed: {e}")
        return record

    def info(self, message: str, **context: Any) -> ReportRecord:
        return self.emit(ReportRecord(level=ReportLevel.INFO, message=message, context=context))

    def warning(self, message: str, **context: Any) -> ReportRecord:
        return self.emit(ReportRecord(level=ReportLevel.WARNING, message=message, context=context))

    def fault(self, fault: SyncFault) -> ReportRecord:
        return self.emit(
            ReportRecord(
                level=fault.level,
                message=fault.message,
                fault=fault.kind,
                context=dict(fault.context),
            )
        )

    @contextmanager
    def capture(self) -> Iterator[List[ReportRecord]]:
        """Collect every record emitted inside the block."""
        records: List[ReportRecord] = []
        sink = records.append
        self.add_sink(sink)
        try:
            yield records
        finally:
            self.remove_sink(sink)
