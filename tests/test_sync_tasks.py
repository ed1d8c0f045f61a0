from unittest.mock import MagicMock, patch

import pytest
import redis
from celery import Task

from catalog_sync.constants.sync import CycleStatus
from catalog_sync.models.sync_models import CycleReport
from catalog_sync.tasks import sync_tasks


@pytest.fixture
def scheduler():
    scheduler = MagicMock()
    scheduler.trigger.return_value = CycleReport(status=CycleStatus.NO_CHANGES, trigger="manual")
    with patch.object(sync_tasks, "get_sync_scheduler", return_value=scheduler):
        yield scheduler


def test_cycle_runs_under_redis_lock(scheduler):
    lock = MagicMock()
    lock.acquire.return_value = True
    with patch.object(sync_tasks, "redis_client", MagicMock()), \
            patch.object(sync_tasks, "RedisLock", return_value=lock):
        result = sync_tasks.run_reconciliation_cycle(trigger="manual")

    assert result["status"] == "no_changes"
    assert result["trigger"] == "manual"
    scheduler.trigger.assert_called_once_with("manual")
    lock.acquire.assert_called_once_with(blocking=False)
    lock.release.assert_called_once()


def test_cycle_skipped_when_lock_is_held(scheduler):
    lock = MagicMock()
    lock.acquire.return_value = False
    with patch.object(sync_tasks, "redis_client", MagicMock()), \
            patch.object(sync_tasks, "RedisLock", return_value=lock):
        result = sync_tasks.run_reconciliation_cycle()

    assert result == {"status": "skipped", "reason": "locked"}
    scheduler.trigger.assert_not_called()


def test_cycle_runs_without_lock_when_redis_is_down(scheduler):
    lock = MagicMock()
    lock.acquire.side_effect = redis.ConnectionError("connection refused")
    with patch.object(sync_tasks, "redis_client", MagicMock()), \
            patch.object(sync_tasks, "RedisLock", return_value=lock):
        result = sync_tasks.run_reconciliation_cycle()

    assert result["status"] == "no_changes"
    lock.release.assert_not_called()


def test_cycle_skipped_when_scheduler_is_busy(scheduler):
    scheduler.trigger.return_value = None
    with patch.object(sync_tasks, "redis_client", None):
        result = sync_tasks.run_reconciliation_cycle()

    assert result == {"status": "skipped", "reason": "running"}


def test_reset_connectivity_check(scheduler):
    with patch.object(sync_tasks, "redis_client", None):
        result = sync_tasks.reset_connectivity_check()

    assert result == {"status": "reset"}
    scheduler.cycle.reset_connectivity.assert_called_once()


class FakeRedis:
    """Just the key operations the trigger guard uses."""

    def __init__(self):
        self.values = {}
        self.ttls = {}

    def exists(self, key):
        return int(key in self.values)

    def set(self, key, value, nx=False, ex=None):
        if nx and key in self.values:
            return None
        self.values[key] = value
        self.ttls[key] = ex
        return True

    def delete(self, key):
        self.values.pop(key, None)
        self.ttls.pop(key, None)


@pytest.fixture
def fake_redis():
    client = FakeRedis()
    with patch.object(sync_tasks, "redis_client", client):
        yield client


@pytest.fixture
def apply_async():
    with patch.object(Task, "apply_async") as apply_async:
        apply_async.return_value = MagicMock(id="task-1")
        yield apply_async


def test_trigger_dropped_while_cycle_lock_is_held(fake_redis, apply_async, scheduler):
    fake_redis.set(sync_tasks.settings.sync_lock_key, "token")

    assert sync_tasks.request_cycle("manual") is None

    # Nothing was queued, so releasing the lock leaves no cycle to run later
    fake_redis.delete(sync_tasks.settings.sync_lock_key)
    apply_async.assert_not_called()
    scheduler.trigger.assert_not_called()
    assert fake_redis.exists(sync_tasks.pending_key()) == 0


def test_trigger_queues_cycle_with_expiry(fake_redis, apply_async):
    task = sync_tasks.request_cycle("manual")

    assert task.id == "task-1"
    apply_async.assert_called_once_with(
        kwargs={"trigger": "manual"},
        expires=sync_tasks.settings.sync_trigger_expires,
    )
    assert fake_redis.values[sync_tasks.pending_key()] == "manual"
    assert fake_redis.ttls[sync_tasks.pending_key()] == sync_tasks.settings.sync_trigger_expires


def test_second_trigger_dropped_while_first_is_queued(fake_redis, apply_async):
    assert sync_tasks.request_cycle("manual") is not None
    assert sync_tasks.request_cycle("scheduled") is None

    apply_async.assert_called_once()


def test_started_cycle_clears_pending_marker(fake_redis, apply_async, scheduler):
    sync_tasks.request_cycle("manual")
    lock = MagicMock()
    lock.acquire.return_value = True

    with patch.object(sync_tasks, "RedisLock", return_value=lock):
        sync_tasks.run_reconciliation_cycle(trigger="manual")

    assert fake_redis.exists(sync_tasks.pending_key()) == 0
    assert sync_tasks.request_cycle("manual") is not None


def test_trigger_queued_unguarded_when_redis_is_down(apply_async):
    client = MagicMock()
    client.exists.side_effect = redis.ConnectionError("connection refused")
    with patch.object(sync_tasks, "redis_client", client):
        task = sync_tasks.request_cycle("manual")

    assert task is not None
    apply_async.assert_called_once()


def test_beat_dispatch_uses_trigger_guard(fake_redis, apply_async):
    result = sync_tasks.schedule_reconciliation_cycle()

    assert result == {"status": "queued", "task_id": "task-1"}
    apply_async.assert_called_once_with(
        kwargs={"trigger": "scheduled"},
        expires=sync_tasks.settings.sync_trigger_expires,
    )


def test_beat_dispatch_skipped_while_cycle_is_running(fake_redis, apply_async):
    fake_redis.set(sync_tasks.settings.sync_lock_key, "token")

    result = sync_tasks.schedule_reconciliation_cycle()

    assert result == {"status": "skipped", "reason": "running"}
    apply_async.assert_not_called()
