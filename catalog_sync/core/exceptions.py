"""
Fault taxonomy of the reconciliation engine.

Every fault is reported through the SyncReporter; none of them stops the
process. The worst outcome of a fault is a cycle that accomplished nothing.
"""
from typing import Any, Dict, Optional

from catalog_sync.constants.sync import ReportLevel


class SyncFault(Exception):
    """Base class for faults raised or reported during a cycle."""

    level: str = ReportLevel.ERROR

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    @property
    def kind(self) -> str:
        return type(self).__name__


class SkippableRowError(SyncFault):
    """A source or cache row is malformed or incomplete; that row is skipped."""
    level = ReportLevel.WARNING


class ConsistencyFault(SyncFault):
    """Cache and remote confirmation disagree; that item is skipped."""
    level = ReportLevel.CRITICAL


class ConnectivityFault(SyncFault):
    """A collaborator probe failed; the cycle aborts before any mutation."""
    level = ReportLevel.ERROR


class FetchFault(SyncFault):
    """Reading the source catalog or the remote catalog failed."""
    level = ReportLevel.CRITICAL


class UploadFault(SyncFault):
    """A remote write failed; the rest of the upload is abandoned."""
    level = ReportLevel.CRITICAL


class ImageFault(SyncFault):
    """Uploading or binding a single image failed."""
    level = ReportLevel.ERROR


class WooCommerceAPIError(Exception):
    """Non-successful response from the WooCommerce REST API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MediaHostError(Exception):
    """Non-successful or unreadable response from the WordPress media API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
