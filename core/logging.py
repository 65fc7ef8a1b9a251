# PATH: core/logging.py
"""
Structured logging for RELAY.

Contract: contextual fields are passed only via extra={"context": {...}}.
Settlement records and rejections are logged with their full context so
that a relayer can reconstruct every decision from the log alone.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, Union

LOGGER_PREFIX = "relay"


class StructuredFormatter(logging.Formatter):
    """JSON formatter: one object per line, context under "context"."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            log_data["context"] = context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Amounts are ints; anything else (enums, bytes) is stringified
        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter; shows the first few context fields."""

    MAX_CONTEXT_FIELDS = 4

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        base = f"{timestamp} | {record.levelname:<8} | {record.name} | {record.getMessage()}"

        context = getattr(record, "context", None)
        if context:
            items = list(context.items())
            ctx_str = ", ".join(f"{k}={v}" for k, v in items[: self.MAX_CONTEXT_FIELDS])
            if len(items) > self.MAX_CONTEXT_FIELDS:
                ctx_str += f", ... (+{len(items) - self.MAX_CONTEXT_FIELDS} more)"
            base += f" | {ctx_str}"

        return base


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Logging level (int or name such as "DEBUG")
        log_file: Optional file path; file output is always JSON
        json_format: Use JSON on the console instead of the human format
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        StructuredFormatter() if json_format else ConsoleFormatter()
    )
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the relay namespace.

    Args:
        name: Logger name (typically module name)
    """
    if name.startswith(LOGGER_PREFIX):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")
