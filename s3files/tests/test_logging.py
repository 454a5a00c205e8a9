"""
Unit Tests: Structured Logging

Tests:
    - JSON formatting of record extras
    - Credential masking and byte payloads
    - Default fields on child loggers
    - Root logger setup
"""

import io
import json
import logging

import pytest

from s3files.observability.logging import (
    JsonFormatter,
    LogLevel,
    StructuredLogger,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(**extra):
    return logging.makeLogRecord({
        "name": "s3files.test",
        "msg": "Uploaded object",
        "levelname": "DEBUG",
        "levelno": logging.DEBUG,
        **extra,
    })


class TestJsonFormatter:
    """Tests for JSON output."""

    def test_includes_extras(self):
        data = json.loads(JsonFormatter().format(_record(key="uploads/a.jpg", size=12)))
        assert data["message"] == "Uploaded object"
        assert data["logger"] == "s3files.test"
        assert data["level"] == "DEBUG"
        assert data["key"] == "uploads/a.jpg"
        assert data["size"] == 12
        assert "@timestamp" in data
        assert "levelno" not in data

    def test_masks_credentials(self):
        record = _record(secret_access_key="wJalr", session_token="tok", access_key_id=None)
        data = json.loads(JsonFormatter().format(record))
        assert data["secret_access_key"] == "***"
        assert data["session_token"] == "***"
        assert data["access_key_id"] is None
        assert "wJalr" not in JsonFormatter().format(record)

    def test_bytes_logged_as_size(self):
        data = json.loads(JsonFormatter().format(_record(body=b"\x00" * 5)))
        assert data["body"] == "<5 bytes>"


class TestStructuredLogger:
    """Tests for the keyword-extra logger."""

    def test_with_extra(self, caplog):
        caplog.set_level(logging.DEBUG, logger="s3files.test.child")
        log = StructuredLogger("s3files.test.child").with_extra(bucket="media")
        log.debug("Deleted object", key="a")
        [record] = caplog.records
        assert record.bucket == "media"
        assert record.key == "a"

    def test_level_filtering(self, caplog):
        caplog.set_level(logging.WARNING, logger="s3files.test.quiet")
        log = StructuredLogger("s3files.test.quiet")
        log.debug("hidden")
        log.warning("shown")
        assert [r.getMessage() for r in caplog.records] == ["shown"]


class TestSetupLogging:
    """Tests for root logger configuration."""

    def test_json_output(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(LogLevel.INFO, json_output=True, stream=stream)
        StructuredLogger("s3files.test.setup").info("hello", key="k")
        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "hello"
        assert data["key"] == "k"
        assert logging.getLogger("botocore").level == logging.WARNING

    def test_plain_output(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging(LogLevel.INFO, json_output=False, stream=stream)
        StructuredLogger("s3files.test.plain").info("hello")
        assert "| INFO     | s3files.test.plain | hello" in stream.getvalue()
