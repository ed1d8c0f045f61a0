"""
Schemas for sync management
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class TriggerSyncResponse(BaseModel):
    """Response after queueing a manual reconciliation cycle"""
    task_id: str
    status: str = "pending"
    message: str


class SyncTaskStatusResponse(BaseModel):
    """State of a queued Celery task"""
    task_id: str
    status: str = Field(..., description="PENDING, STARTED, SUCCESS, FAILURE, ...")
    ready: bool
    successful: Optional[bool] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    service: str = "catalog_sync"
