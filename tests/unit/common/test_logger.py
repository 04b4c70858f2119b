"""Tests for logging setup."""

import logging

import pytest

from riskflow.common.logger import configure_logging, get_logger
from riskflow.core.config import Settings


@pytest.fixture
def logger_name(request):
    name = f"riskflow-test-{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_console_only(self, logger_name):
        logger = configure_logging(Settings(log_level="debug", file_logging=False), name=logger_name)

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_file_logging(self, logger_name, tmp_path):
        log_dir = tmp_path / "logs"
        settings = Settings(log_dir=str(log_dir), file_logging=True)
        logger = configure_logging(settings, name=logger_name, console=False)

        logger.info("risk accepted")
        for handler in logger.handlers:
            handler.flush()

        content = (log_dir / f"{logger_name}.log").read_text()
        assert "[INFO]" in content
        assert "risk accepted" in content

    def test_reconfigure_keeps_handlers(self, logger_name):
        configure_logging(Settings(file_logging=False), name=logger_name)
        logger = configure_logging(Settings(log_level="ERROR", file_logging=False), name=logger_name)

        assert len(logger.handlers) == 1
        assert logger.level == logging.ERROR

    def test_invalid_level(self, logger_name):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(Settings(log_level="LOUD", file_logging=False), name=logger_name)

    def test_http_client_loggers_quieted(self, logger_name):
        configure_logging(Settings(file_logging=False), name=logger_name)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_get_logger_returns_same_instance(self, logger_name):
        assert get_logger(logger_name) is configure_logging(Settings(file_logging=False), name=logger_name)
