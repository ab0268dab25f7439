"""
Core Module - Logging.

============================================================
RESPONSIBILITY
============================================================
Structured, field-tagged log events on top of stdlib logging.

- One root StreamHandler configured by setup_logging()
- log_event() attaches fields to a record as `extra`
- JSON or text output

============================================================
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO


FIELDS_ATTR = "fields"
LOG_FORMATS = ("text", "json")


# ============================================================
# FORMATTERS
# ============================================================

class StructuredFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, FIELDS_ATTR, None)
        if fields:
            payload.update(fields)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


# ============================================================
# SETUP
# ============================================================

def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Set up process-wide logging.

    Args:
        level: Log level name
        log_format: Output format (json or text)
        stream: Output stream (default: stdout)

    Returns:
        The root logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return root_logger


# ============================================================
# EVENTS
# ============================================================

def format_fields(message: str, fields: Dict[str, Any]) -> str:
    """Append `| key=value` pairs to a message."""
    parts = [message] if message else []
    parts.extend(f"{k}={v}" for k, v in fields.items())
    return " | ".join(parts)


def log_event(
    logger: logging.Logger,
    level: int,
    message: str = "",
    exc_info: Any = None,
    **fields: Any,
) -> None:
    """
    Emit one field-tagged event.

    Example:
        log_event(logger, logging.DEBUG, action="start_composite_component",
                  component_index=0, component_name="db")
    """
    if not logger.isEnabledFor(level):
        return
    logger.log(
        level,
        format_fields(message, fields),
        exc_info=exc_info,
        extra={FIELDS_ATTR: fields},
    )


__all__ = [
    "LOG_FORMATS",
    "StructuredFormatter",
    "setup_logging",
    "format_fields",
    "log_event",
]
