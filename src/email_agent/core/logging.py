"""Logging configuration helpers."""

from __future__ import annotations

import logging.config
from datetime import date
from pathlib import Path
from typing import Any

_LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
}


def log_file_path(log_dir: Path, today: date | None = None) -> Path:
    """Return the dated log file for a run, e.g. ``agent-2024-01-15.log``."""
    today = today or date.today()
    return log_dir / f"agent-{today.isoformat()}.log"


def configure_logging(level: str = "info", log_dir: Path | None = None) -> None:
    """Configure root logging: console always, a dated file when ``log_dir`` is set."""
    resolved = _LEVELS.get(level.lower(), "INFO")

    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "level": resolved,
        },
    }
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "file",
            "filename": str(log_file_path(log_dir)),
            "encoding": "utf-8",
            "level": resolved,
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                "datefmt": "%H:%M:%S",
            },
            "file": {
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": resolved,
        },
        # googleapiclient logs every discovery fetch at INFO
        "loggers": {
            "googleapiclient.discovery_cache": {"level": "ERROR"},
        },
    })


__all__ = ["configure_logging", "log_file_path"]
