"""
Sync Management endpoints: manual triggering and task inspection.
"""
import logging

from celery.result import AsyncResult
from fastapi import APIRouter, HTTPException

from catalog_sync.celery_app import celery_app
from catalog_sync.constants.sync import SyncMode
from catalog_sync.schemas.sync_schemas import SyncTaskStatusResponse, TriggerSyncResponse
from catalog_sync.tasks.sync_tasks import request_cycle, reset_connectivity_check

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync-management", tags=["Sync Management"])


@router.post("/trigger", response_model=TriggerSyncResponse, status_code=202)
async def trigger_sync():
    """
    Queue a manual reconciliation cycle.

    Returns 409 when a cycle is already running or queued; the trigger is
    dropped rather than run later.
    """
    task = request_cycle(SyncMode.MANUAL)
    if task is None:
        raise HTTPException(status_code=409, detail="An update is already running!")
    return TriggerSyncResponse(
        task_id=str(task.id),
        message="Reconciliation cycle queued",
    )


@router.get("/tasks/{task_id}", response_model=SyncTaskStatusResponse)
async def get_sync_task_status(task_id: str):
    task_result = AsyncResult(task_id, app=celery_app)

    response = SyncTaskStatusResponse(
        task_id=task_id,
        status=task_result.status,
        ready=task_result.ready(),
    )
    if response.ready:
        response.successful = task_result.successful()
        if response.successful:
            response.result = task_result.result
        else:
            response.error = str(task_result.info)
    return response


@router.post("/connectivity/reset", response_model=TriggerSyncResponse, status_code=202)
async def reset_connectivity():
    """Queue a forced connectivity re-check for the next cycle."""
    task = reset_connectivity_check.apply_async()
    logger.info(f"Connectivity reset queued: {task.id}")
    return TriggerSyncResponse(
        task_id=str(task.id),
        message="Connectivity will be verified on the next cycle",
    )
