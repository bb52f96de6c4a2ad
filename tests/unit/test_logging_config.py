"""
Unit tests for quizgen/core/logging_config.py
"""

import json
import logging

import pytest

from quizgen.core.logging_config import (
    ConsoleFormatter,
    JSONFormatter,
    RequestIDFilter,
    request_id_var,
    setup_logging,
)


def make_record(message="hello"):
    return logging.LogRecord("quizgen.test", logging.WARNING, __file__, 10, message, None, None)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_formatter_includes_request_id():
    token = request_id_var.set("req-42")
    try:
        record = make_record()
        RequestIDFilter().filter(record)
    finally:
        request_id_var.reset(token)

    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "hello"
    assert payload["level"] == "WARNING"
    assert payload["request_id"] == "req-42"


def test_console_formatter_without_request_id():
    record = make_record("attempt 1/3 failed")
    RequestIDFilter().filter(record)
    line = ConsoleFormatter().format(record)
    assert "[WARNING]" in line
    assert "attempt 1/3 failed" in line


def test_setup_logging_writes_rotating_files(tmp_path, restore_root_logger):
    setup_logging("production", "DEBUG", tmp_path)

    logging.getLogger("quizgen.test").error("boom")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert (tmp_path / "quizgen.log").exists()
    assert "boom" in (tmp_path / "quizgen-errors.log").read_text(encoding="utf-8")
