"""Tests for logging setup."""

import logging
from logging.handlers import TimedRotatingFileHandler

from deliverywatch.utils import logger as logger_module
from deliverywatch.utils.logger import get_logger, setup_logger


class TestSetupLogger:
    """Test setup_logger()."""

    def test_handlers(self, tmp_path):
        """Test a console and a rotating file handler are attached."""
        logger = setup_logger("deliverywatch.test_handlers", level="DEBUG", log_dir=str(tmp_path))

        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        file_handlers = [h for h in logger.handlers if isinstance(h, TimedRotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].baseFilename == str(tmp_path / "deliverywatch.log")

    def test_writes_to_package_log(self, tmp_path):
        """Test records land in the top-level package's log file."""
        logger = setup_logger("deliverywatch.test_writes", level="INFO", log_dir=str(tmp_path))

        logger.warning("Withheld delivery to a@b.test")
        for handler in logger.handlers:
            handler.flush()

        assert "Withheld delivery to a@b.test" in (tmp_path / "deliverywatch.log").read_text()

    def test_cached(self, tmp_path):
        """Test configuring the same name twice returns the same logger."""
        first = setup_logger("deliverywatch.test_cached", log_dir=str(tmp_path))
        second = setup_logger("deliverywatch.test_cached", level="ERROR", log_dir=str(tmp_path))

        assert first is second
        assert len(second.handlers) == 2


class TestGetLogger:
    """Test get_logger()."""

    def test_returns_existing(self, tmp_path):
        """Test get_logger reuses a configured logger."""
        configured = setup_logger("deliverywatch.test_existing", log_dir=str(tmp_path))

        assert get_logger("deliverywatch.test_existing") is configured

    def test_creates_with_env_defaults(self, tmp_path, monkeypatch):
        """Test unknown names are configured from LOG_LEVEL and LOG_DIR."""
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("LOG_DIR", str(tmp_path))

        logger = get_logger("deliverywatch.test_env_defaults")

        assert logger.level == logging.WARNING
        assert "deliverywatch.test_env_defaults" in logger_module._loggers
