"""
Logging Configuration — Structured logging setup.

Progress for humans goes to stdout through Click; this configures the
diagnostic log stream on stderr:
- Human-readable output by default
- JSON output for schedulers and log shippers
- Configurable log levels

## Environment Variables

- REPOMIRROR_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: WARNING)
- REPOMIRROR_LOG_FORMAT: json, text (default: text)

## Usage

    from repomirror.logging_config import setup_logging

    setup_logging()  # Call once at startup
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

DEFAULT_LEVEL = "WARNING"
DEFAULT_FORMAT = "text"


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Output format:
    {"ts": "...", "level": "...", "logger": "...", "message": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        if hasattr(record, "repository"):
            log_entry["repository"] = record.repository
        if hasattr(record, "target"):
            log_entry["target"] = record.target

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class HumanFormatter(logging.Formatter):
    """
    One line per record; the message already carries its [subsystem] tag.

    Output format:
    12:34:56 WARNING [executor] a: clone failed
    """

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s %(message)s", datefmt="%H:%M:%S")


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
               Defaults to REPOMIRROR_LOG_LEVEL or WARNING.
        format_type: Output format (json, text).
                     Defaults to REPOMIRROR_LOG_FORMAT or text.
    """
    log_level = (level or os.environ.get("REPOMIRROR_LOG_LEVEL", DEFAULT_LEVEL)).upper()
    log_format = (format_type or os.environ.get("REPOMIRROR_LOG_FORMAT", DEFAULT_FORMAT)).lower()

    formatter: logging.Formatter = JSONFormatter() if log_format == "json" else HumanFormatter()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, log_level, logging.WARNING))

    logging.getLogger(__name__).debug(
        f"Logging configured: level={log_level}, format={log_format}"
    )
