"""Logging setup for AuthStorm."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

# Attributes the worker attaches via ``extra=`` on per-attempt log lines.
_ATTEMPT_FIELDS = ("worker_id", "attempt_index", "error_kind", "status_code")


class _JsonFormatter(logging.Formatter):
    """One-line JSON formatter.

    Emits keys: timestamp, level, logger, message, plus any per-attempt
    fields present on the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in _ATTEMPT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def setup_logging(
    level: int = logging.INFO,
    *,
    json_format: bool = False,
) -> logging.Logger:
    """Configure and return the root ``authstorm`` logger.

    Attaches a stderr handler to the ``authstorm`` namespace. Calling it
    again only updates levels; handlers are never duplicated.

    Args:
        level: Logging level. Defaults to INFO.
        json_format: Emit one JSON object per line instead of plain text.

    Returns:
        The configured ``authstorm`` logger.
    """
    logger = logging.getLogger("authstorm")
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        formatter: logging.Formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Prevent duplicate output through the root logger
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``authstorm`` namespace.

    Example: ``get_logger("engine.worker")`` returns
    ``logging.getLogger("authstorm.engine.worker")``.
    """
    return logging.getLogger(f"authstorm.{name}")
