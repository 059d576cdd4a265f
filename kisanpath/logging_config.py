import logging
import os
from logging.config import dictConfig

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Configure process logging from KISANPATH_* environment flags."""
    level = os.getenv("KISANPATH_LOG_LEVEL", "INFO").upper()
    telemetry_level = os.getenv("KISANPATH_TELEMETRY_LOG_LEVEL", level).upper()

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": os.getenv("KISANPATH_LOG_FORMAT", DEFAULT_LOG_FORMAT),
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "kisanpath.telemetry": {"level": telemetry_level},
            },
            "root": {
                "handlers": ["stderr"],
                "level": level,
            },
        }
    )

    if os.getenv("KISANPATH_DEBUG_SQL", "0") == "1":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
