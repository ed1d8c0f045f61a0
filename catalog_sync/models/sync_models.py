from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from catalog_sync.constants.sync import CycleStatus, SyncMode
from catalog_sync.core.reporting import ReportRecord


class CycleReport(BaseModel):
    """Outcome of one reconciliation cycle"""
    status: CycleStatus
    trigger: str = SyncMode.SCHEDULED

    cache_refreshed: bool = False
    cache_size: int = 0

    source_rows: int = 0
    created: int = 0
    updated: int = 0
    rejected: int = 0
    images_attached: int = 0

    records: List[ReportRecord] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def faults(self) -> List[ReportRecord]:
        return [record for record in self.records if record.fault]

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()
