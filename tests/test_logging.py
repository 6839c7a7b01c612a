"""Tests for structured logging infrastructure."""

import io
import json
import logging
from datetime import datetime
from pathlib import Path

import pytest

from envguard.logging_config import (
    StructuredFormatter,
    StructuredLogger,
    correlation_id_var,
    configure_logging,
)
from envguard.store import EnvStore
from envguard.tools.scan import _scan_document

from conftest import OPENAI_KEY


def _json_logger(name: str, level: int = logging.INFO) -> tuple[logging.Logger, io.StringIO]:
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.addHandler(handler)
    return logger, log_stream


def test_structured_formatter_basic():
    """Test that StructuredFormatter emits valid JSON."""
    logger, log_stream = _json_logger("test_basic")

    logger.info("Test message")

    log_data = json.loads(log_stream.getvalue().strip())

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test_basic"
    assert log_data["message"] == "Test message"

    # ISO 8601 with Z suffix
    assert log_data["timestamp"].endswith("Z")
    datetime.fromisoformat(log_data["timestamp"].rstrip("Z"))


def test_structured_formatter_with_correlation_id():
    """Test that correlation IDs are included when set."""
    logger, log_stream = _json_logger("test_correlation")

    correlation_id_var.set("test-correlation-123")
    try:
        logger.info("Test with correlation")
        log_data = json.loads(log_stream.getvalue().strip())
        assert log_data["correlation_id"] == "test-correlation-123"
    finally:
        correlation_id_var.set(None)


def test_structured_formatter_without_correlation_id():
    """Test that correlation_id field is omitted when not set."""
    logger, log_stream = _json_logger("test_no_correlation")
    correlation_id_var.set(None)

    logger.info("Test without correlation")

    assert "correlation_id" not in json.loads(log_stream.getvalue().strip())


def test_structured_formatter_with_extra_fields():
    """Test that document, operation and extra fields are included."""
    logger, log_stream = _json_logger("test_extra")

    record = logger.makeRecord(
        logger.name,
        logging.INFO,
        "(test)",
        0,
        "Test with extras",
        (),
        None
    )
    record.document = "src/app.py"
    record.operation = "envguard.scan.file"
    record.duration_ms = 42
    record.extra = {"custom_field": "custom_value"}

    logger.handle(record)

    log_data = json.loads(log_stream.getvalue().strip())

    assert log_data["document"] == "src/app.py"
    assert log_data["operation"] == "envguard.scan.file"
    assert log_data["duration_ms"] == 42
    assert log_data["extra"] == {"custom_field": "custom_value"}


def test_structured_formatter_with_exception():
    """Test that exceptions are formatted correctly."""
    logger, log_stream = _json_logger("test_exception", logging.ERROR)

    try:
        raise ValueError("Test error")
    except ValueError:
        logger.exception("Error occurred")

    log_data = json.loads(log_stream.getvalue().strip())

    assert log_data["level"] == "ERROR"
    assert "ValueError: Test error" in log_data["exc_info"]


def test_structured_formatter_serializes_paths():
    """Non-JSON values such as paths are stringified."""
    logger, log_stream = _json_logger("test_paths")
    structured = StructuredLogger("test_paths")

    structured.info("Stored", operation="store.merge", path=Path("/w/.env"))

    assert json.loads(log_stream.getvalue().strip())["extra"]["path"] == "/w/.env"


def test_structured_logger_info():
    """Test StructuredLogger.info() method."""
    _, log_stream = _json_logger("test_info")
    test_logger = StructuredLogger("test_info")

    test_logger.info(
        "Operation started",
        document="config.ts",
        operation="envguard.remediate.apply",
        custom_key="custom_value"
    )

    log_data = json.loads(log_stream.getvalue().strip())

    assert log_data["level"] == "INFO"
    assert log_data["document"] == "config.ts"
    assert log_data["operation"] == "envguard.remediate.apply"
    assert log_data["extra"]["custom_key"] == "custom_value"


def test_structured_logger_error():
    """Test StructuredLogger.error() method."""
    _, log_stream = _json_logger("test_error", logging.ERROR)
    test_logger = StructuredLogger("test_error")

    test_logger.error(
        "Error occurred",
        document="app.py",
        operation="envguard.remediate.apply",
        duration_ms=100,
        error="Something went wrong"
    )

    log_data = json.loads(log_stream.getvalue().strip())

    assert log_data["level"] == "ERROR"
    assert log_data["duration_ms"] == 100
    assert log_data["extra"]["error"] == "Something went wrong"


def test_structured_logger_respects_level():
    """Records below the logger level are dropped."""
    _, log_stream = _json_logger("test_level", logging.WARNING)
    test_logger = StructuredLogger("test_level")

    test_logger.debug("hidden")
    test_logger.info("hidden")
    test_logger.warning("shown")

    lines = log_stream.getvalue().strip().splitlines()
    assert [json.loads(line)["message"] for line in lines] == ["shown"]


def test_configure_logging_structured():
    """Test configure_logging with structured=True."""
    configure_logging(log_level="INFO", structured=True)

    root_logger = logging.getLogger("envguard")

    assert root_logger.level == logging.INFO
    assert len(root_logger.handlers) == 1
    assert isinstance(root_logger.handlers[0].formatter, StructuredFormatter)


def test_configure_logging_human_readable():
    """Test configure_logging with structured=False."""
    configure_logging(log_level="DEBUG", structured=False)

    root_logger = logging.getLogger("envguard")

    assert root_logger.level == logging.DEBUG
    handler = root_logger.handlers[0]
    assert not isinstance(handler.formatter, StructuredFormatter)
    assert isinstance(handler.formatter, logging.Formatter)


def test_configure_logging_with_file(tmp_path):
    """Test configure_logging writes to log file."""
    log_file = tmp_path / "test.log"

    configure_logging(log_level="INFO", structured=True, log_file=str(log_file))

    logging.getLogger("envguard.file_test").info("Test file logging")

    log_data = json.loads(log_file.read_text().strip())
    assert log_data["message"] == "Test file logging"
    assert log_data["level"] == "INFO"


def test_store_logs_masked_value(temp_dir, caplog):
    """The secret never appears in log records."""
    caplog.set_level(logging.INFO, logger="envguard")

    EnvStore(temp_dir / ".env").save_secret("API_KEY", OPENAI_KEY)

    records = [r for r in caplog.records if getattr(r, "operation", None) == "store.merge"]
    assert records
    for record in records:
        assert OPENAI_KEY not in record.getMessage()
        assert OPENAI_KEY not in json.dumps(getattr(record, "extra", {}), default=str)
    assert records[-1].extra["value"] == "sk-t" + "*" * 20 + "mnop"


@pytest.mark.asyncio
async def test_tool_handler_sets_and_clears_correlation_id(server, caplog):
    """Each tool call logs under one correlation id, cleared afterwards."""
    caplog.set_level(logging.INFO, logger="envguard")
    seen: list[str | None] = []

    class Capture(logging.Handler):
        def emit(self, record):
            seen.append(correlation_id_var.get())

    handler = Capture()
    logging.getLogger("envguard.server").addHandler(handler)
    try:
        await _scan_document(server, text=f'k = "{OPENAI_KEY}"', document="a.py")
    finally:
        logging.getLogger("envguard.server").removeHandler(handler)

    assert len(seen) == 2
    assert seen[0] is not None
    assert seen[0] == seen[1]
    assert correlation_id_var.get() is None

    operations = [getattr(r, "operation", None) for r in caplog.records]
    assert "envguard.scan.document" in operations
    assert all(OPENAI_KEY not in r.getMessage() for r in caplog.records)


def test_correlation_id_isolation():
    """Test that correlation IDs don't leak between operations."""
    correlation_id_var.set("test-123")
    assert correlation_id_var.get() == "test-123"

    correlation_id_var.set(None)
    assert correlation_id_var.get() is None
