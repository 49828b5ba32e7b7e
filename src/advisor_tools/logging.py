"""Structured logging helpers shared by the tool server and the advisor.

Records are emitted as one JSON object per line on stderr. Stdout of the
tool server carries the protocol, so nothing here may write to it.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone

_CONFIGURED = False
PACKAGE_LOGGERS = ("advisor_tools", "advisor_server", "advisor_cli")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class StderrHandler(logging.StreamHandler):
    """Always writes to the current ``sys.stderr``, even if it was swapped."""

    def emit(self, record: logging.LogRecord) -> None:
        self.stream = sys.stderr
        super().emit(record)


def configure_logging(level: str | None = None) -> None:
    """Attach the JSON stderr handler to the package loggers.

    The handler is added once; later calls only adjust the level.
    """
    global _CONFIGURED
    resolved = (level or os.environ.get("FINADVISOR_LOG_LEVEL") or "INFO").upper()
    handler = None
    if not _CONFIGURED:
        handler = StderrHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        _CONFIGURED = True
    for name in PACKAGE_LOGGERS:
        root = logging.getLogger(name)
        if handler is not None:
            root.addHandler(handler)
            root.propagate = False
        if level is not None or handler is not None:
            root.setLevel(resolved)


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
