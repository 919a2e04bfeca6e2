"""Tests for the JSON log formatter."""

import json
import logging

from docmost_bridge.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "docmost_bridge.test", logging.WARNING, __file__, 1,
        "API call attempt %d failed", (2,), None,
    )
    record.__dict__.update(extra)
    return record


def test_json_line_has_base_fields():
    line = json.loads(JSONFormatter().format(_record()))
    assert line["level"] == "WARNING"
    assert line["logger"] == "docmost_bridge.test"
    assert line["message"] == "API call attempt 2 failed"
    assert "timestamp" in line


def test_bridge_fields_lifted_when_present():
    line = json.loads(JSONFormatter().format(
        _record(attempt=2, status_code=503, path="/api/spaces", tier=None),
    ))
    assert line["attempt"] == 2
    assert line["status_code"] == 503
    assert line["path"] == "/api/spaces"
    assert "tier" not in line
