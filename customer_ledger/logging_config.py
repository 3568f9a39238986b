"""
Logging setup.

Console logging through logging.config.dictConfig. Called once
from the application entry point; library code only ever asks
for a module logger.
"""

import logging.config

from customer_ledger.config import get_settings


def build_logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            # Records propagate to the root handler
            "customer_ledger": {"level": level},
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }


def setup_logging() -> None:
    """Apply the console logging configuration for this process."""
    settings = get_settings()
    logging.config.dictConfig(build_logging_config(settings.LOG_LEVEL))
