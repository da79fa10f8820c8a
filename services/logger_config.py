# services/logger_config.py
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def _file_handler(path: str, formatter: logging.Formatter) -> Optional[logging.Handler]:
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        # Read-only checkouts still get console logging
        print(f"Error setting up file logger: {e}")
        return None
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the service logger used by the API and the ingestion CLI.

    Records go to a rotating UTF-8 file under log/ and to the console.
    Calling it again replaces the handlers instead of stacking them.
    """
    logger = logging.getLogger(settings.LOGGER_NAME)
    if logger.hasHandlers():
        logger.handlers.clear()

    logger.setLevel((level or settings.LOG_LEVEL).upper())
    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = _file_handler(settings.LOG_FILE_PATH, formatter)
    if file_handler is not None:
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    logger.propagate = True

    logger.info(f"Logging configured at {logging.getLevelName(logger.level)}.")
    return logger
