"""
Celery application configuration for the catalog sync service.
"""
from celery import Celery
from celery.signals import setup_logging

from catalog_sync.core.config import settings
from catalog_sync.core.logging_config import configure_logging

# Create Celery instance
celery_app = Celery(
    "catalog_sync",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "catalog_sync.tasks.sync_tasks",
    ]
)

celery_app.conf.update(
    # Serialization
    task_serializer=settings.celery_task_serializer,
    result_serializer=settings.celery_result_serializer,
    accept_content=settings.celery_accept_content,

    # Timezone
    timezone=settings.celery_timezone,
    enable_utc=settings.celery_enable_utc,

    # Task execution
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes hard limit
    task_soft_time_limit=25 * 60,  # 25 minutes soft limit

    # The remote catalog cache lives in the worker process: one process,
    # one task at a time, no recycling
    worker_concurrency=1,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=None,

    # Result backend
    result_expires=7200,  # Keep results for 2 hours

    # Cycles run on sync_queue (one worker, concurrency 1). The beat
    # dispatcher runs on scheduler_queue so it is never stuck behind a cycle.
    task_routes={
        'catalog_sync.tasks.sync_tasks.schedule_reconciliation_cycle': {
            'queue': 'scheduler_queue',
        },
        'catalog_sync.tasks.sync_tasks.*': {
            'queue': 'sync_queue',
        },
    },

    # Broker connection
    broker_connection_retry_on_startup=True,
    broker_connection_retry=True,
    broker_connection_max_retries=10,
)

celery_app.conf.beat_schedule = {
    'catalog-reconciliation': {
        'task': 'catalog_sync.tasks.sync_tasks.schedule_reconciliation_cycle',
        'schedule': settings.sync_interval_minutes * 60.0,
        'options': {'expires': settings.sync_trigger_expires},
    },
}


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    configure_logging()


if __name__ == '__main__':
    celery_app.start()
