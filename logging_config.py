"""Process-wide logging setup.

Log lines look like::

    2024-03-05T10:00:00Z | INFO | services.ingestion | Received and saved sensor data | temperature=25.0 humidity=60.0

Only the ``extra=`` keys listed in ``CONTEXT_KEYS`` are appended, in that order.
"""

from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from typing import Iterable

CONTEXT_KEYS = (
    "query",
    "region_count",
    "province_count",
    "sensor_count",
    "temperature",
    "humidity",
    "collection",
    "database",
    "reason",
)

_LINE_FORMAT = "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_configured = False


class ContextualFormatter(logging.Formatter):
    """Formatter that appends ``key=value`` pairs taken from the record's extras."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        context_keys: Iterable[str] = CONTEXT_KEYS,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self.context_keys = tuple(context_keys)

    def context_suffix(self, record: logging.LogRecord) -> str:
        pairs = (
            f"{key}={record.__dict__[key]}"
            for key in self.context_keys
            if record.__dict__.get(key) is not None
        )
        return " ".join(pairs)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        suffix = self.context_suffix(record)
        return f"{line} | {suffix}" if suffix else line


def _level_from_env() -> str:
    # Read directly: settings may not validate yet (missing MONGO_URI).
    return (os.getenv("LOG_LEVEL") or "").strip().upper() or "INFO"


def configure_logging(level: str | int | None = None) -> None:
    """Install the contextual stream handler on the root logger once."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else _level_from_env()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": ContextualFormatter,
                    "fmt": _LINE_FORMAT,
                    "datefmt": _DATE_FORMAT,
                    "context_keys": list(CONTEXT_KEYS),
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "contextual",
                }
            },
            "root": {"handlers": ["console"], "level": log_level},
        }
    )
    _configured = True
