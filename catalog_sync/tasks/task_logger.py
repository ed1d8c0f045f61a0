"""
Logging decorator for Celery tasks.
"""
import functools
import logging
import time
from typing import Any, Callable

from celery import Task

logger = logging.getLogger(__name__)


def log_celery_task(func: Callable) -> Callable:
    """
    Log start, success and failure of a bound Celery task.

    Usage:
        @celery_app.task(bind=True)
        @log_celery_task
        def my_task(self, arg1, arg2):
            ...
    """
    @functools.wraps(func)
    def wrapper(self: Task, *args, **kwargs) -> Any:
        started = time.monotonic()
        logger.info(f"Task {self.name} [{self.request.id}] started")
        try:
            result = func(self, *args, **kwargs)
        except Exception as exc:
            logger.error(f"Task {self.name} [{self.request.id}] failed: {exc}")
            # Re-raise so Celery records the failure
            raise
        logger.info(
            f"Task {self.name} [{self.request.id}] completed successfully "
            f"in {time.monotonic() - started:.2f}s"
        )
        return result

    return wrapper
