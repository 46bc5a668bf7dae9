"""
Tests for logger functionality.
"""

import pytest
from articlefill.logger import StructuredLogger, get_logger, reset_logger


class TestStructuredLogger:
    """Test structured logging functionality."""

    def test_logger_creation(self, tmp_path):
        """Logger should be created with default settings."""
        logger = StructuredLogger(
            name="test",
            level="INFO",
            log_dir=tmp_path,
            enable_console=False,
        )

        assert logger.logger.name == "test"
        assert logger.metrics["fetches_attempted"] == 0

    def test_log_methods(self):
        """All log level methods should work."""
        logger = StructuredLogger(name="test", enable_console=False)

        logger.debug("Debug message")
        logger.info("Info message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.critical("Critical message")

    def test_context_written_as_json(self, tmp_path):
        """Context keywords are appended as JSON, non-ASCII kept readable."""
        logger = StructuredLogger(name="test-context", log_dir=tmp_path, enable_console=False)

        logger.info("Stored article", article_id="abc123", title="周报")

        content = list(tmp_path.glob("*.log"))[0].read_text(encoding="utf-8")
        assert 'Stored article | Context: {"article_id": "abc123", "title": "周报"}' in content

    def test_no_file_without_log_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        logger = StructuredLogger(name="test-nofile", enable_console=False)

        logger.info("Test message")

        assert list(tmp_path.rglob("*.log")) == []

    def test_metrics_tracking(self):
        """Metrics should be tracked correctly."""
        logger = StructuredLogger(name="test", enable_console=False)

        logger.record_fetch_attempt()
        logger.record_fetch_success()
        logger.record_fetch_attempt()
        logger.record_retry()
        logger.record_retry()
        logger.record_fetch_failure("Timeout")

        metrics = logger.get_metrics()

        assert metrics["fetches_attempted"] == 2
        assert metrics["fetches_successful"] == 1
        assert metrics["fetches_failed"] == 1
        assert metrics["retries"] == 2
        assert metrics["errors_by_type"]["Timeout"] == 1
        assert metrics["success_rate"] == 0.5

    def test_success_rate_calculation(self):
        """Success rate should be calculated correctly."""
        logger = StructuredLogger(name="test", enable_console=False)

        for _ in range(3):
            logger.record_fetch_attempt()
        logger.record_fetch_success()
        logger.record_fetch_success()

        assert logger.get_metrics()["success_rate"] == pytest.approx(0.667, rel=0.01)

    def test_metrics_summary(self, tmp_path):
        logger = StructuredLogger(name="test-summary", log_dir=tmp_path, enable_console=False)
        logger.record_fetch_attempt()
        logger.record_fetch_failure("ConnectionError")

        logger.log_metrics_summary()

        content = list(tmp_path.glob("*.log"))[0].read_text(encoding="utf-8")
        assert "Fetches: 0/1 (0.0% success)" in content
        assert "ConnectionError: 1" in content


class TestGlobalLogger:
    """Test the process logger."""

    def test_get_logger_singleton(self):
        """get_logger should return same instance."""
        reset_logger()

        logger1 = get_logger(enable_console=False)
        logger2 = get_logger()

        assert logger1 is logger2

    def test_reset_logger(self):
        """reset_logger should create new instance."""
        reset_logger()

        logger1 = get_logger(enable_console=False)
        logger1.record_retry()

        reset_logger()

        logger2 = get_logger(enable_console=False)

        assert logger2 is not logger1
        assert logger2.metrics["retries"] == 0
