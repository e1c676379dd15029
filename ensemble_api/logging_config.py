# ensemble_api/logging_config.py

import logging
from logging.config import dictConfig

from .config import LOG_FORMAT, LOG_LEVEL


def build_logging_config(level: str = LOG_LEVEL, fmt: str = LOG_FORMAT) -> dict:
    """Return the dictConfig mapping for the given level and format."""
    formatters = {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
    }
    formatter = "standard"
    if fmt == "json":
        formatter = "json"
        formatters["json"] = {
            "class": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }


def setup_logging() -> None:
    """
    Configure logging for the application.
    Idempotent: does nothing if the root logger already has handlers.
    """
    if logging.root.hasHandlers():
        return
    dictConfig(build_logging_config())
