"""Tests for logging_config module."""

import logging

import pytest

from logging_config import PROJECT_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def _reset(reset_logging):
    yield


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_only(self):
        assert setup_logging(logging.INFO) is None
        logger = logging.getLogger("model")
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO
        assert not logger.propagate

    def test_log_file(self, tmp_path):
        """Test records of submodules reach the rotating log file."""
        log_file = tmp_path / "logs" / "worldgen.log"
        assert setup_logging(log_file=log_file) == log_file

        logging.getLogger("model.rtin").debug("terrain message")
        for handler in logging.getLogger("model").handlers:
            handler.flush()

        assert "terrain message" in log_file.read_text(encoding="utf-8")
        assert logging.getLogger("model").level == logging.DEBUG

    def test_repeated_setup_replaces_handlers(self, tmp_path):
        setup_logging(logging.INFO, log_file=tmp_path / "first.log")
        setup_logging(logging.WARNING)
        for name in PROJECT_LOGGERS:
            assert len(logging.getLogger(name).handlers) == 1
