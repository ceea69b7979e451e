"""
Structured JSON logging configuration for the Neurio daemon.

Every log record is emitted as a single JSON line containing
``timestamp``, ``level``, ``logger`` and ``message``, plus ``exception``
when the record carries a traceback. Verbose mode (``-v``) simply
configures the root logger at DEBUG.

CHANGELOG:
- 2026-03-02: Initial creation (STORY-107)

TODO:
- None
"""

import json
import logging
import sys
from datetime import UTC, datetime


class JSONFormatter(logging.Formatter):
    """Logging formatter that outputs one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging(level: int = logging.INFO) -> None:
    """Install a single JSON ``StreamHandler`` on the root logger.

    Existing root handlers are removed so repeated calls never duplicate
    output.

    Args:
        level: Logging level for the root logger.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)

    # httpx logs every request at INFO; only surface it in verbose mode.
    logging.getLogger("httpx").setLevel(
        logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    )
