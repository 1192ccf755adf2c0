"""Logging utilities."""

import logging
from logging.config import dictConfig
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def build_logging_config(level: str = "INFO", json_output: bool = False) -> Dict[str, Any]:
    """Build a dictConfig mapping with a console or JSON stderr handler."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "fmt": JSON_FORMAT,
            },
            "console": {
                "format": CONSOLE_FORMAT,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "json" if json_output else "console",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "handlers": ["default"],
            "level": level.upper(),
        },
    }


def configure_logging(config: Optional[Dict[str, Any]] = None) -> None:
    """
    Configure logging from the ``logging`` section of the app config.

    Args:
        config: Mapping with optional ``level`` and ``json`` keys
    """
    config = config or {}
    dictConfig(
        build_logging_config(
            level=str(config.get("level", "INFO")),
            json_output=bool(config.get("json", False)),
        )
    )


def get_logger(name: str) -> logging.Logger:
    """Retrieve a logger with the given name."""
    return logging.getLogger(name)
