"""
Tests for the log formatters and request context.
"""

from __future__ import annotations

import json
import logging

from backend.app.core.logging_config import (
    JSONFormatter,
    PrettyFormatter,
    get_request_context,
    set_request_context,
)


def _record(msg="Fetched events", **extra) -> logging.LogRecord:
    record = logging.LogRecord("backend.app.relief", logging.INFO, __file__, 10, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def teardown_method(self):
        set_request_context()

    def test_relief_fields_nested(self):
        line = JSONFormatter().format(_record(source="PHIVOLCS", event_count=3))
        entry = json.loads(line)
        assert entry["message"] == "Fetched events"
        assert entry["relief"] == {"source": "PHIVOLCS", "event_count": 3}
        assert entry["level"] == "INFO"

    def test_http_fields_top_level(self):
        entry = json.loads(JSONFormatter().format(_record(status_code=200, duration_ms=1.5)))
        assert entry["status_code"] == 200
        assert "relief" not in entry

    def test_request_context_included(self):
        set_request_context(request_id="abc", endpoint="/api/v1/relief/health")
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["request"]["request_id"] == "abc"


class TestPrettyFormatter:
    def teardown_method(self):
        set_request_context()

    def test_tags(self):
        line = PrettyFormatter().format(_record(cached=True))
        assert "Fetched events" in line
        assert "cached=True" in line

    def test_request_id_prefix(self):
        set_request_context(request_id="0123456789abcdef")
        assert "[01234567]" in PrettyFormatter().format(_record())


class TestRequestContext:
    def test_reset(self):
        set_request_context(request_id="x")
        set_request_context()
        assert get_request_context() == {}
