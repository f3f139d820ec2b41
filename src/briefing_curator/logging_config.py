"""Logging setup for the briefing curator.

Usage:
    from briefing_curator.logging_config import configure_logging
    configure_logging(level="INFO", json_format=False)
"""

import json
import logging
import os
import sys
import time
from typing import Any, Optional


class JSONFormatter(logging.Formatter):
    """One JSON object per log line.

    {"ts": "2026-03-09T07:00:00.120Z", "level": "INFO",
     "logger": "briefing_curator.core.briefing", "msg": "Selected 8 main items ..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
                  + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            entry["file"] = f"{record.filename}:{record.lineno}"

        if record.exc_info and record.exc_info[1]:
            entry["error"] = str(record.exc_info[1])
            entry["error_type"] = type(record.exc_info[1]).__name__

        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", json_format: Optional[bool] = None) -> None:
    """Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use the JSON formatter. None reads BRIEFING_LOG_JSON.
    """
    if json_format is None:
        json_format = bool(os.environ.get("BRIEFING_LOG_JSON"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-5s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))

    root.addHandler(handler)
