"""Constants for sync operations."""

from enum import Enum


class CycleStatus(str, Enum):
    """Outcome of one reconciliation cycle."""
    COMPLETED = "completed"
    NO_CHANGES = "no_changes"
    ABORTED_CONNECTIVITY = "aborted_connectivity"
    ABORTED_FETCH = "aborted_fetch"
    ABORTED_UPLOAD = "aborted_upload"


class SyncMode:
    """What started a cycle."""
    MANUAL = "manual"
    SCHEDULED = "scheduled"


class ReportLevel:
    """Severity of a report record."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
