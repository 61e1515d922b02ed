# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import io
import json
import logging

import pytest

from contentstore.contracts import HashMismatchError
from contentstore.core.backends.memory import MemoryBackend
from contentstore.core.content_store import ContentStore
from contentstore.core.logging import configure_logging, get_logger
from tests.conftest import descriptor_for


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        logger = get_logger("test")

        assert hasattr(logger, "info")
        assert hasattr(logger, "bind")

    def test_logger_outputs_json_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        assert captured.out == ""
        data = json.loads(captured.err.strip().split("\n")[-1])
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert "_record" not in data

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=False)

        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.err
        assert not captured.err.strip().startswith("{")

    def test_level_filters_debug(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True, level="INFO")

        get_logger("test").debug("hidden")

        assert "hidden" not in capsys.readouterr().err

    def test_stdlib_records_share_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)

        logging.getLogger("some.library").warning("from stdlib")

        data = json.loads(capsys.readouterr().err.strip().split("\n")[-1])
        assert data["event"] == "from stdlib"
        assert data["level"] == "warning"

    def test_noisy_third_party_loggers_silenced(self) -> None:
        """Azure SDK and urllib3 stay at WARNING even in DEBUG mode."""
        configure_logging(level="DEBUG")

        assert logging.getLogger("azure").level == logging.WARNING
        assert logging.getLogger("azure.core.pipeline.policies.http_logging_policy").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_noisy_loggers_never_less_restrictive_than_root(self) -> None:
        configure_logging(level="ERROR")

        assert logging.getLogger("azure").level == logging.ERROR


class TestStoreLogging:
    def test_rejected_put_logs_identity(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(json_output=True)
        store = ContentStore(MemoryBackend())
        declared = descriptor_for(b"expected")

        with pytest.raises(HashMismatchError):
            store.put(declared, io.BytesIO(b"imposter"))

        events = [json.loads(line) for line in capsys.readouterr().err.strip().split("\n")]
        rejected = [e for e in events if e["event"] == "Rejected put: hash mismatch"]
        assert len(rejected) == 1
        assert rejected[0]["oid"] == declared.oid
        assert rejected[0]["level"] == "warning"
