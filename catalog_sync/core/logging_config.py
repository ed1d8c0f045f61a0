import logging.config
from typing import Optional

from catalog_sync.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y.%m.%d %H:%M:%S"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Install console logging and, when configured, an appending log file."""
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "default",
            "filename": log_file,
            "encoding": "utf-8",
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": LOG_DATE_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
    })
