"""Tests for engine logging setup."""

import logging
from logging.handlers import RotatingFileHandler

from config import settings
from services.logger_config import setup_logging


def test_console_and_rotating_file_handlers(tmp_path, monkeypatch):
    log_file = tmp_path / "logs" / "engine.log"
    monkeypatch.setattr(settings, "LOG_FILE_PATH", str(log_file))

    logger = setup_logging("debug")
    logger.debug("handler check")

    assert logger.level == logging.DEBUG
    assert sum(isinstance(h, RotatingFileHandler) for h in logger.handlers) == 1
    assert log_file.exists()
    assert logging.getLogger("httpx").level == logging.WARNING


def test_repeated_setup_does_not_stack_handlers(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "LOG_FILE_PATH", str(tmp_path / "engine.log"))

    setup_logging()
    logger = setup_logging()

    assert len(logger.handlers) == 2
