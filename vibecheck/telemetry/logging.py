"""Logging setup shared by the CLI and the web app."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED_FIELDS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Third-party loggers that are chatty at INFO/DEBUG.
_QUIET_LOGGERS = ("urllib3", "readability", "httpx", "httpcore")


class StructuredFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_FIELDS or key.startswith("_"):
                continue
            payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Install a single root handler.

    Explicit arguments win over ``VIBECHECK_LOG_LEVEL`` / ``VIBECHECK_LOG_FORMAT``.
    """

    level_name = (level or os.getenv("VIBECHECK_LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    fmt_name = (fmt or os.getenv("VIBECHECK_LOG_FORMAT", "plain")).lower()

    handler = logging.StreamHandler()
    if fmt_name in {"json", "structured"}:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)
    root_logger.handlers = [handler]

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))


__all__ = ["configure_logging", "StructuredFormatter"]
