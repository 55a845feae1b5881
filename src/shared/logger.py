"""
Centralized logging utilities for the project planner core.

Supports both JSON (production) and text (development) log formats.
JSON format is meant for log aggregation; text is the default for local use.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _effective_format() -> str:
    return os.getenv("LOG_FORMAT", "text").lower()


LOG_FORMAT_TEXT = "%(asctime)s - %(service)s - %(levelname)s - %(message)s"

_RESERVED_ATTRS = frozenset([
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "service", "payload", "taskName",
])


class ServiceFilter(logging.Filter):
    """Injects the service name into log records."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service"):
            record.service = self.service_name
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Promotes keys from extra={"payload": {...}} or extra={"project_id": ...}
    to top-level JSON fields for easy filtering.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": getattr(record, "service", "unknown"),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "payload") and isinstance(record.payload, dict):
            log_data.update(record.payload)
        else:
            for key in ["project_id", "task_id", "template_id", "revision", "error"]:
                value = getattr(record, key, None)
                if value is not None:
                    log_data[key] = value

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_") or key in log_data:
                continue
            log_data[key] = value

        return json.dumps(log_data, ensure_ascii=False, default=str)


def get_logger(service_name: str, name: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Configure and return a logger that writes to stdout with consistent format.

    Format is determined by LOG_FORMAT environment variable:
    - "json": Structured JSON logs
    - "text" (default): Human-readable text logs

    Args:
        service_name: Logical service identifier (e.g., "store", "collaboration").
        name: Optional logger name; defaults to service_name.
        level: Logging level; defaults to INFO.

    Example (JSON format):
        logger.info("Project saved", extra={"payload": {"project_id": "123", "revision": 4}})
        # Output: {"timestamp": "...", "service": "store", "level": "INFO", "message": "Project saved", "project_id": "123", "revision": 4}
    """
    logger_name = name or service_name
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    eff_format = _effective_format()

    if logger.handlers:
        # Reconfigure if format changed
        logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    if eff_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT_TEXT))

    handler.addFilter(ServiceFilter(service_name))
    logger.addHandler(handler)

    return logger
