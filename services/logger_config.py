# services/logger_config.py
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'

# Third-party loggers that log every provider request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def _file_handler(formatter: logging.Formatter) -> Optional[logging.Handler]:
    """Rotating file handler, or None when the log file cannot be opened."""
    log_path = Path(settings.LOG_FILE_PATH)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        return None
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configures the engine logger: console always, rotating file when writable.
    Safe to call more than once; handlers are replaced, not stacked.
    """
    logger = logging.getLogger(settings.LOGGER_NAME)
    if logger.hasHandlers():
        logger.handlers.clear()

    logger.setLevel((level or settings.LOG_LEVEL).upper())
    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    file_handler = _file_handler(formatter)
    if file_handler is not None:
        logger.addHandler(file_handler)
    else:
        logger.warning(f"File logging disabled, could not open {settings.LOG_FILE_PATH}")

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info(f"Logging configured at {logging.getLevelName(logger.level)}.")
    return logger
