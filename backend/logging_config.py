import logging
import os
from logging.config import dictConfig

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Configure process-wide logging from SYNC_LOG_LEVEL."""
    level = os.getenv("SYNC_LOG_LEVEL", "INFO").upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": DEFAULT_LOG_FORMAT,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
        }
    )

    # cloudscraper/urllib3 are chatty at DEBUG; SYNC_DEBUG_HTTP=1 lets them follow the root level
    debug_http = os.getenv("SYNC_DEBUG_HTTP", "0") == "1"
    logging.getLogger("urllib3").setLevel(logging.NOTSET if debug_http else logging.WARNING)
