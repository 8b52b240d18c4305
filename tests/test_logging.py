"""
Tests for structured logging.
"""

import json
import logging
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from monitoring.logging import (
    ConsoleFormatter,
    JSONFormatter,
    LoggingContext,
    clear_request_context,
    configure_logging,
    get_request_context,
    redact_sensitive_data,
    redact_string,
    set_request_context,
)


def _record(message, *args, level=logging.INFO, **extra):
    record = logging.LogRecord("pics_labels", level, __file__, 10, message, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRedaction:
    """Tests for credential redaction."""

    def test_redact_string(self):
        assert redact_string("api_key=abc123 ok") == "api_key=[REDACTED] ok"
        assert redact_string("Authorization: Bearer xyz") == "Authorization: Bearer [REDACTED]"

    def test_redact_fields(self):
        data = {"Cookie": "session=1", "nested": [{"token": "t"}], "path": "/"}
        assert redact_sensitive_data(data) == {
            "Cookie": "[REDACTED]",
            "nested": [{"token": "[REDACTED]"}],
            "path": "/",
        }


class TestRequestContext:
    """Tests for thread-local request context."""

    def setup_method(self):
        clear_request_context()

    def teardown_method(self):
        clear_request_context()

    def test_set_and_clear(self):
        set_request_context(request_id="abc")
        assert get_request_context() == {"request_id": "abc"}
        clear_request_context()
        assert get_request_context() == {}

    def test_logging_context_restores_previous(self):
        set_request_context(request_id="outer")
        with LoggingContext(systems="rsaci"):
            assert get_request_context() == {"request_id": "outer", "systems": "rsaci"}
        assert get_request_context() == {"request_id": "outer"}


class TestFormatters:
    """Tests for the JSON and console formatters."""

    def setup_method(self):
        clear_request_context()

    def teardown_method(self):
        clear_request_context()

    def test_json_formatter(self):
        set_request_context(request_id="abc")
        entry = json.loads(JSONFormatter().format(_record("Labeled %d page(s)", 2, systems=2)))
        assert entry["message"] == "Labeled 2 page(s)"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "pics_labels"
        assert entry["context"] == {"request_id": "abc"}
        assert entry["systems"] == 2
        assert "location" not in entry

    def test_json_formatter_warning_location(self):
        entry = json.loads(JSONFormatter().format(_record("careful", level=logging.WARNING)))
        assert entry["location"]["line"] == 10

    def test_json_formatter_redacts(self):
        entry = json.loads(JSONFormatter().format(_record("token=secret-value")))
        assert entry["message"] == "token=[REDACTED]"

    def test_console_formatter(self):
        set_request_context(request_id="abc")
        line = ConsoleFormatter().format(_record("hello", status_code=200))
        assert "[pics_labels]" in line
        assert "request_id=abc" in line
        assert "status_code=200" in line


class TestConfigureLogging:
    def test_json_output(self, tmp_path):
        log_file = tmp_path / "pics.log"
        root = logging.getLogger()
        previous = list(root.handlers), root.level
        try:
            configure_logging(level="DEBUG", json_output=True, log_file=str(log_file))
            assert root.level == logging.DEBUG
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
            assert isinstance(root.handlers[1].formatter, JSONFormatter)
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = previous[0]
            root.setLevel(previous[1])
