"""Tests for logging configuration."""
import logging
from pathlib import Path

import pytest

from bucketload.logging_config import get_logger, setup_logging


@pytest.mark.unit
class TestSetupLogging:
    """Test setup_logging function."""

    def test_setup_logging_default(self) -> None:
        """Test setup_logging with default parameters."""
        logger = setup_logging()

        assert logger.name == "bucketload"
        assert logger.level == logging.INFO
        assert logger.propagate is False

    def test_setup_logging_verbose(self) -> None:
        """Test setup_logging with verbose mode."""
        logger = setup_logging(verbose=True)

        assert logger.level == logging.DEBUG

    def test_setup_logging_with_log_file(self, temp_dir: Path) -> None:
        """Test setup_logging with log file."""
        log_file = temp_dir / "test.log"

        logger = setup_logging(log_file=str(log_file))
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2  # Console + File
        assert "hello" in log_file.read_text()

        for handler in logger.handlers:
            handler.close()
        setup_logging()

    def test_setup_logging_twice_does_not_duplicate_handlers(self) -> None:
        """Test that repeated setup replaces handlers."""
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1


@pytest.mark.unit
class TestGetLogger:
    """Test get_logger function."""

    def test_get_logger(self) -> None:
        """Test getting a logger for a module."""
        logger = get_logger("test_module")

        assert logger.name == "bucketload.test_module"

    def test_get_logger_with_module_name(self) -> None:
        """Test that package module names are not prefixed twice."""
        logger = get_logger("bucketload.objects.router")

        assert logger.name == "bucketload.objects.router"
