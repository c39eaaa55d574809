"""
Shared logger for flashbox.

Console output is always on. A rotating file handler is added when
FLASHBOX_LOG_FILE is configured (or `add_file_handler` is called).
"""

import os
import logging
import logging.handlers

from flashbox.config import LOG_LEVEL, LOG_FILE

LOGGER_NAME = 'flashbox'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(module)s: %(message)s'

_formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')


def add_file_handler(log_file: str, level: str = LOG_LEVEL) -> logging.Handler:
    """Attach a rotating file handler (10 MB, 5 backups) to the shared logger."""
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    file_handler.setFormatter(_formatter)
    logger.addHandler(file_handler)
    return file_handler


def setup_logging(log_level: str = LOG_LEVEL) -> logging.Logger:
    level = getattr(logging, log_level.upper(), logging.INFO)

    configured = logging.getLogger(LOGGER_NAME)
    configured.setLevel(level)
    configured.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(_formatter)
    configured.addHandler(console_handler)

    return configured


logger = setup_logging()

if LOG_FILE:
    add_file_handler(LOG_FILE)
