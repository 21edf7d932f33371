import sys
from logging.config import dictConfig

from app.core.config import LOG_LEVEL, STOCK_LOG_LEVEL

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

ACCESS_FORMAT = (
    "%(asctime)s | ACCESS | %(request_id)s | "
    "%(client_addr)s | user=%(user_id)s | %(method)s | "
    "%(path)s | %(status_code)s | %(process_time_ms)sms"
)


def setup_logging():
    console = {
        "class": "logging.StreamHandler",
        "stream": sys.stdout,
    }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": DEFAULT_FORMAT},
                "access": {"format": ACCESS_FORMAT},
            },
            "handlers": {
                "console": {**console, "formatter": "default"},
                "access_console": {**console, "formatter": "access"},
            },
            "loggers": {
                # written by request_logging_middleware only
                "access": {
                    "handlers": ["access_console"],
                    "level": "INFO",
                    "propagate": False,
                },
                # ledger writes, version conflicts, retry exhaustion
                "app.services.stock": {"level": STOCK_LOG_LEVEL},
                # uvicorn's own access line duplicates ours
                "uvicorn.access": {"level": "WARNING"},
                "sqlalchemy.engine": {"level": "WARNING"},
            },
            "root": {
                "level": LOG_LEVEL,
                "handlers": ["console"],
            },
        }
    )
