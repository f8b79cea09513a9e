"""
Logging configuration shared by the API service and the mock server.

Installs a single stdout handler on the root logger so module loggers
(``logging.getLogger(__name__)``) emit without per-module setup.
"""

import logging
from logging.config import dictConfig


def _build_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level: str = "INFO") -> None:
    """
    Configure application-wide logging once.

    Returns early when the root logger already has handlers, which
    happens under reloaders and when the test runner captures output.
    """
    if logging.getLogger().handlers:
        return
    dictConfig(_build_config(level.upper()))
