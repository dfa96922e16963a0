# tests/unit/logging/test_logger.py — v3
"""Tests for logging/logger.py — logger factory and formatters."""

from __future__ import annotations

import json
import logging

from paperchat.logging.context import (
    clear_context,
    set_component_context,
    set_document_context,
    set_request_context,
)
from paperchat.logging.logger import JsonFormatter, TextFormatter, setup_logging


def _record(msg: str = "Hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_request_context("req123")
        set_document_context("arxiv-2301-12345")
        parsed = json.loads(JsonFormatter().format(_record("test msg")))
        assert parsed["context"]["request_id"] == "req123"
        assert parsed["context"]["document_id"] == "arxiv-2301-12345"

    def test_format_with_data(self):
        parsed = json.loads(JsonFormatter().format(_record(data={"raw_output": "oops"})))
        assert parsed["data"] == {"raw_output": "oops"}

    def test_format_with_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            import sys
            record = _record()
            record.exc_info = sys.exc_info()
        parsed = json.loads(JsonFormatter().format(record))
        assert "ValueError: bad" in parsed["exception"]
        assert parsed["exception_type"] == "ValueError"

    def test_timestamp_from_record(self):
        record = _record()
        record.created = 0.0
        parsed = json.loads(JsonFormatter().format(record))
        assert parsed["timestamp"].startswith("1970-01-01T00:00:00")


class TestTextFormatter:
    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output

    def test_includes_request_and_component(self):
        set_request_context("abc")
        set_component_context("paper_chat")
        output = TextFormatter().format(_record())
        assert "<abc>" in output
        assert "[paper_chat]" in output

    def test_includes_document(self):
        set_document_context("arxiv-2301-12345")
        assert "{arxiv-2301-12345}" in TextFormatter().format(_record())


class TestSetupLogging:
    def test_setup_json(self):
        setup_logging(level="DEBUG", log_format="json")
        root = logging.getLogger("paperchat")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_setup_text(self):
        setup_logging(level="INFO", log_format="text")
        root = logging.getLogger("paperchat")
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_reinit_does_not_duplicate(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("paperchat").handlers) == 1

    def test_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "paperchat.log"
        setup_logging(log_file=str(log_file), rotation="1MB", retention=2)
        root = logging.getLogger("paperchat")
        assert len(root.handlers) == 2
        assert log_file.parent.is_dir()
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()

    def test_quiets_http_libraries(self):
        setup_logging()
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_routes_uvicorn_to_same_handlers(self):
        setup_logging(log_format="text")
        app_handlers = logging.getLogger("paperchat").handlers
        server = logging.getLogger("uvicorn.error")
        assert server.handlers == app_handlers
        assert server.propagate is False
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_access_log_at_debug(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger("uvicorn.access").level == logging.INFO
