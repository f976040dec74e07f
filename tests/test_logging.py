"""Tests for logging module."""

import logging
import re

from progress_indicator.config import Config
from progress_indicator.logging import reset_logging, setup_logging


class TestSetupLogging:
    """Test logging setup."""

    def test_setup_logging_returns_logger(self):
        """Setup returns the package logger."""
        logger = setup_logging(Config())

        assert isinstance(logger, logging.Logger)
        assert logger.name == "progress_indicator"

    def test_setup_logging_creates_log_file(self, tmp_path):
        """Logging setup creates the log file and its directory."""
        log_file = tmp_path / "subdir" / "test.log"
        config = Config(log_file=str(log_file))

        logger = setup_logging(config)
        logger.info("test message")

        assert log_file.exists()
        assert "test message" in log_file.read_text()

    def test_log_levels_respected(self, tmp_path):
        """Only logs at configured level and above."""
        log_file = tmp_path / "test.log"
        config = Config(log_file=str(log_file), log_level="WARNING")

        logger = setup_logging(config)
        logger.info("info message")
        logger.warning("warning message")

        content = log_file.read_text()
        assert "info message" not in content
        assert "warning message" in content

    def test_module_loggers_reach_file(self, tmp_path):
        """Module loggers under the package share the handlers."""
        log_file = tmp_path / "test.log"
        setup_logging(Config(log_file=str(log_file), log_level="DEBUG"))

        logging.getLogger("progress_indicator.registry").debug("session shown")

        assert "session shown" in log_file.read_text()

    def test_log_format_includes_timestamp(self, tmp_path):
        """Log entries have timestamp, level, message."""
        log_file = tmp_path / "test.log"

        logger = setup_logging(Config(log_file=str(log_file)))
        logger.info("test message")

        pattern = r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} \[INFO\] test message"
        assert re.search(pattern, log_file.read_text())

    def test_invalid_level_falls_back_to_info(self):
        """Unknown level names use INFO."""
        logger = setup_logging(Config(log_level="chatty"))

        assert logger.level == logging.INFO

    def test_setup_logging_idempotent(self, tmp_path):
        """Multiple setup calls don't duplicate handlers."""
        config = Config(log_file=str(tmp_path / "test.log"))

        logger1 = setup_logging(config)
        initial_handlers = len(logger1.handlers)
        logger2 = setup_logging(config)

        assert logger1 is logger2
        assert len(logger2.handlers) == initial_handlers

    def test_reset_logging_restores_propagation(self):
        """reset_logging() undoes the setup."""
        logger = setup_logging(Config())

        reset_logging()

        assert logger.handlers == []
        assert logger.propagate is True
