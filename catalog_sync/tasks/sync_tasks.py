"""
Celery tasks driving the reconciliation engine.

Cycles are requested through request_cycle(), which drops the request when a
cycle is already running or already queued. The worker therefore never finds
a second cycle message waiting behind a running one.
"""
import logging
from typing import Any, Dict, Optional

import redis
from celery import Task
from celery.result import AsyncResult
from redis.lock import Lock as RedisLock

from catalog_sync.celery_app import celery_app
from catalog_sync.constants.sync import SyncMode
from catalog_sync.core.config import settings
from catalog_sync.factories.engine_factory import get_sync_scheduler
from catalog_sync.tasks.task_logger import log_celery_task

logger = logging.getLogger(__name__)

# Initialize Redis client for the cross-process cycle lock
try:
    redis_client = redis.Redis.from_url(settings.celery_broker_url, decode_responses=True)
    logger.info("Redis client initialized for the cycle lock")
except Exception as e:
    logger.warning(f"Failed to initialize Redis client: {e}. Cycle lock will be disabled.")
    redis_client = None


def pending_key() -> str:
    """Redis key marking a cycle message that is queued but not started."""
    return f"{settings.sync_lock_key}:pending"


def _acquire_cycle_lock():
    """
    Return an acquired lock, None when busy, or False when Redis is unavailable.
    """
    if not redis_client:
        return False
    lock = RedisLock(redis_client, settings.sync_lock_key, timeout=settings.sync_lock_timeout)
    try:
        acquired = lock.acquire(blocking=False)
    except redis.RedisError as e:
        logger.warning(f"Redis unavailable, running without the cycle lock: {e}")
        return False
    return lock if acquired else None


def _clear_pending() -> None:
    # The cycle lock now guards the slot; new triggers see it instead
    try:
        redis_client.delete(pending_key())
    except redis.RedisError as e:
        logger.warning(f"Could not clear pending cycle marker: {e}")


def _claim_trigger(trigger: str) -> bool:
    """
    Reserve the single cycle slot for a new trigger.

    Fails while a cycle runs (the cycle lock is held) or while another
    trigger is queued (the pending marker is set).
    """
    if not redis_client:
        return True
    try:
        if redis_client.exists(settings.sync_lock_key):
            return False
        claimed = redis_client.set(
            pending_key(), trigger, nx=True, ex=settings.sync_trigger_expires)
    except redis.RedisError as e:
        logger.warning(f"Redis unavailable, queueing {trigger} cycle unguarded: {e}")
        return True
    return bool(claimed)


def request_cycle(trigger: str = SyncMode.MANUAL) -> Optional[AsyncResult]:
    """
    Queue a reconciliation cycle unless one is running or queued.

    Returns:
        The queued task, or None when the trigger was dropped
    """
    if not _claim_trigger(trigger):
        logger.warning(f"An update is already running! Dropping {trigger} trigger")
        return None
    task = run_reconciliation_cycle.apply_async(
        kwargs={"trigger": trigger},
        expires=settings.sync_trigger_expires,
    )
    logger.info(f"Reconciliation cycle queued ({trigger}): {task.id}")
    return task


@celery_app.task(bind=True, name="catalog_sync.tasks.sync_tasks.run_reconciliation_cycle")
@log_celery_task
def run_reconciliation_cycle(self: Task, trigger: str = SyncMode.SCHEDULED) -> Dict[str, Any]:
    """
    Run one reconciliation cycle in this worker.

    Returns:
        The cycle report as JSON, or {"status": "skipped"} when another
        cycle is running in this or another process
    """
    lock = _acquire_cycle_lock()
    if lock is None:
        logger.warning("An update is already running in another worker, skipping")
        return {"status": "skipped", "reason": "locked"}

    try:
        if lock:
            _clear_pending()
        report = get_sync_scheduler().trigger(trigger)
    finally:
        if lock:
            try:
                lock.release()
            except redis.RedisError as e:
                logger.warning(f"Could not release cycle lock: {e}")

    if report is None:
        return {"status": "skipped", "reason": "running"}
    return report.model_dump(mode="json")


@celery_app.task(bind=True, name="catalog_sync.tasks.sync_tasks.schedule_reconciliation_cycle")
@log_celery_task
def schedule_reconciliation_cycle(self: Task) -> Dict[str, Any]:
    """Beat entry point: request a scheduled cycle through the same guard as manual triggers."""
    task = request_cycle(SyncMode.SCHEDULED)
    if task is None:
        return {"status": "skipped", "reason": "running"}
    return {"status": "queued", "task_id": str(task.id)}


@celery_app.task(bind=True, name="catalog_sync.tasks.sync_tasks.reset_connectivity_check")
@log_celery_task
def reset_connectivity_check(self: Task) -> Dict[str, Any]:
    """Force the collaborators to be probed again on the next cycle."""
    get_sync_scheduler().cycle.reset_connectivity()
    return {"status": "reset"}
