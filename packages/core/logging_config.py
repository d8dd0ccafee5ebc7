from __future__ import annotations

import logging.config
import os
import sys
from typing import Any, Dict, Optional


DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def _log_destination() -> str:
    return os.getenv("LOG_DESTINATION", "stdout").lower()


def _log_file_path() -> Optional[str]:
    return os.getenv("LOG_FILE")


def _handler() -> Dict[str, Any]:
    destination = _log_destination()
    if destination == "file":
        log_file = _log_file_path()
        if not log_file:
            raise RuntimeError("LOG_FILE is required when LOG_DESTINATION=file")
        return {
            "class": "logging.FileHandler",
            "level": _log_level(),
            "filename": log_file,
            "formatter": "standard",
        }
    if destination not in ("stdout", "stderr"):
        raise RuntimeError(f"Unsupported LOG_DESTINATION: {destination}")
    return {
        "class": "logging.StreamHandler",
        "level": _log_level(),
        "stream": sys.stdout if destination == "stdout" else sys.stderr,
        "formatter": "standard",
    }


def configure_logging() -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": os.getenv("LOG_FORMAT", DEFAULT_FORMAT)},
            },
            "handlers": {"default": _handler()},
            "loggers": {
                "unified_schedule": {"level": _log_level(), "propagate": True},
            },
            "root": {"handlers": ["default"], "level": _log_level()},
        }
    )
