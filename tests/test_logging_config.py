"""Tests for logging setup."""

import json
import logging

from briefing_curator.logging_config import JSONFormatter, configure_logging


def test_json_formatter() -> None:
    """Test records render as one JSON object."""
    record = logging.LogRecord(
        "briefing_curator.use_cases", logging.WARNING, "use_cases.py", 42,
        "Profile unavailable: %s", ("timeout",), None,
    )
    
    entry = json.loads(JSONFormatter().format(record))
    
    assert entry["level"] == "WARNING"
    assert entry["logger"] == "briefing_curator.use_cases"
    assert entry["msg"] == "Profile unavailable: timeout"
    assert entry["file"] == "use_cases.py:42"
    assert entry["ts"].endswith("Z")


def test_configure_logging_replaces_handlers(monkeypatch) -> None:
    """Test repeated setup leaves a single handler."""
    monkeypatch.setenv("BRIEFING_LOG_JSON", "1")
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        configure_logging("DEBUG")
        configure_logging("DEBUG")
        
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.DEBUG
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
