"""Process-wide logging setup for the CLI and the HTTP server."""

from __future__ import annotations

import json
import logging
import os
import sys

from ticket_rpa.settings.config import DEFAULT_ENV, ENV_VAR_NAME

_LEVEL_MAP = {
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "WARNING": "WARNING",
    "ERROR": "ERROR",
    "CRITICAL": "CRITICAL",
}


class CloudFormatter(logging.Formatter):
    """JSON formatter emitting Cloud Logging-compatible entries."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "severity": _LEVEL_MAP.get(record.levelname, "DEFAULT"),
            "message": record.getMessage(),
            "logger": record.name,
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: str | None = None) -> None:
    """Set up root logging.

    Outside the ``local`` environment (``TRPA_ENV``), emits one JSON object
    per line so the container's log collector can parse severities::

        {"severity": "INFO", "message": "...", "logger": "...", "time": "..."}

    Locally, uses a human-readable plain-text format.

    Args:
        level: Level name; defaults to ``TRPA_LOG_LEVEL`` or ``INFO``.
    """
    log_level = (level or os.environ.get("TRPA_LOG_LEVEL", "INFO")).upper()
    env = os.environ.get(ENV_VAR_NAME, DEFAULT_ENV).strip()
    numeric = getattr(logging, log_level, logging.INFO)

    if env != DEFAULT_ENV:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(CloudFormatter())
        logging.root.handlers.clear()
        logging.root.addHandler(handler)
        logging.root.setLevel(numeric)
    else:
        logging.basicConfig(
            level=numeric,
            format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
            stream=sys.stderr,
        )

    # Quieten noisy libraries
    for name in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)
