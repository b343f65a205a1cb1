"""
Unit tests for the log formatters and the request-ID filter.
"""

import json
import logging

from equityhub.core.logging import (
    ConsoleFormatter,
    JSONFormatter,
    RequestIDFilter,
    request_id_var,
)


def _record(msg: str = "hello %s", args=("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="equityhub.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRequestIDFilter:
    def test_stamps_current_request_id(self):
        token = request_id_var.set("req-1")
        try:
            record = _record()
            assert RequestIDFilter().filter(record) is True
        finally:
            request_id_var.reset(token)
        assert record.request_id == "req-1"

    def test_no_request_in_flight(self):
        record = _record()
        RequestIDFilter().filter(record)
        assert record.request_id is None


class TestJSONFormatter:
    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(_record(request_id="req-2")))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "equityhub.test"
        assert entry["message"] == "hello world"
        assert entry["request_id"] == "req-2"

    def test_structured_extras(self):
        entry = json.loads(
            JSONFormatter().format(
                _record(company_id="c1", shareholder_id="s1", shares=60, status_code=200)
            )
        )

        assert entry["company_id"] == "c1"
        assert entry["shareholder_id"] == "s1"
        assert entry["shares"] == 60
        assert entry["status_code"] == 200
        assert "elapsed_ms" not in entry


class TestConsoleFormatter:
    def test_includes_short_request_id(self):
        line = ConsoleFormatter().format(_record(request_id="abcdef123456"))

        assert "[abcdef12]" in line
        assert "hello world" in line
