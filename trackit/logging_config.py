from __future__ import annotations

import logging
from logging.config import dictConfig


def configure_logging(level: str = "INFO") -> None:
    """Console logging for the application and the API client."""
    level = (level or "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "[%(asctime)s] %(levelname)s in %(name)s: %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "trackit": {"level": level},
                "httpx": {"level": "WARNING"},
            },
            "root": {"level": level, "handlers": ["console"]},
        }
    )
