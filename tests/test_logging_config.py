"""Tests for logging configuration and credential redaction."""

import io
import json
import logging

import pytest

from bucketkit.logging_config import JSONFormatter, RedactingFilter, configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg: str, *args, **extra) -> logging.LogRecord:
    record = logging.LogRecord("bucketkit.client", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_fields(self):
        entry = json.loads(JSONFormatter().format(_record("hello %s", "world")))
        assert entry["message"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "bucketkit.client"
        assert "timestamp" in entry

    def test_extras(self):
        record = _record("done", bucket="photos", status=200, duration_ms=1.5)
        entry = json.loads(JSONFormatter().format(record))
        assert entry["bucket"] == "photos"
        assert entry["status"] == 200
        assert entry["duration_ms"] == 1.5
        assert "key" not in entry


class TestRedactingFilter:
    def test_masks_credential_and_signature(self):
        record = _record(
            "auth=%s",
            "AWS4-HMAC-SHA256 Credential=AKID/20260101/us-east-1/s3/aws4_request,"
            "SignedHeaders=host,Signature=abcdef",
        )
        assert RedactingFilter().filter(record) is True
        message = record.getMessage()
        assert "AKID" not in message
        assert "abcdef" not in message
        assert "SignedHeaders=host" in message

    def test_leaves_other_messages(self):
        record = _record("Opened bucket %s", "photos")
        RedactingFilter().filter(record)
        assert record.getMessage() == "Opened bucket photos"
        assert record.args == ("photos",)


class TestConfigureLogging:
    def test_json_output(self):
        stream = io.StringIO()
        configure_logging(level="DEBUG", fmt="json", stream=stream)
        logging.getLogger("bucketkit.test").debug("x %d", 1)
        assert json.loads(stream.getvalue())["message"] == "x 1"

    def test_text_output_and_level(self):
        stream = io.StringIO()
        configure_logging(level="WARNING", fmt="text", stream=stream)
        logging.getLogger("bucketkit.test").info("hidden")
        logging.getLogger("bucketkit.test").warning("shown")
        output = stream.getvalue()
        assert "hidden" not in output
        assert "WARNING bucketkit.test: shown" in output

    def test_single_handler(self):
        configure_logging()
        configure_logging()
        assert len(logging.getLogger().handlers) == 1
