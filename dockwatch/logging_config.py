"""Dockwatch logging configuration with JSON formatting.

This module provides structured logging for the event subscriber and the
agent service:
- JSON-formatted log output for log aggregation systems
- A human-readable text format for development
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from dockwatch.config import settings

# LogRecord attributes that are not user-supplied "extra" fields
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
}


class DockwatchJSONFormatter(logging.Formatter):
    """JSON log formatter.

    Formats log records as JSON objects with consistent fields:
    - timestamp: ISO8601 formatted timestamp
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - service: Always "dockwatch"
    - agent_id: The agent's ID (if available)
    - exception: Formatted traceback (if any)
    - extra: Additional context fields
    """

    def __init__(self, agent_id: str = ""):
        super().__init__()
        self.agent_id = agent_id

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": "dockwatch",
        }

        if self.agent_id:
            log_entry["agent_id"] = self.agent_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS:
                continue
            try:
                json.dumps(value)
                extra[key] = value
            except (TypeError, ValueError):
                extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry)


class DockwatchTextFormatter(logging.Formatter):
    """Text log formatter (development use).

    [timestamp] LEVEL [agent_id] logger: message
    """

    def __init__(self, agent_id: str = ""):
        super().__init__()
        self.agent_id = agent_id

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as text."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        agent_part = f" [{self.agent_id[:8]}]" if self.agent_id else ""

        message = f"[{timestamp}] {record.levelname:8}{agent_part} {record.name}: {record.getMessage()}"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def setup_logging(agent_id: str = "") -> None:
    """Configure the root logger from settings.

    Args:
        agent_id: The agent's ID for inclusion in log entries
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)

    if settings.log_format.lower() == "json":
        handler.setFormatter(DockwatchJSONFormatter(agent_id))
    else:
        handler.setFormatter(DockwatchTextFormatter(agent_id))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)

    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    for noisy in ("uvicorn.access", "httpx", "httpcore", "docker", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
