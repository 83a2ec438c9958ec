# app/utils/logger.py
"""
Logging setup shared by every module.
The root logger gets a console handler and a size-rotated file under
LOG_DIR. Thread names are part of the format so interleaved retries of
concurrent transactions can be told apart.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that are chatty at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "urllib3", "httpx")

_HANDLER_MARK = "_delivery_handler"


def _own_handlers(root: logging.Logger) -> list:
    return [h for h in root.handlers if getattr(h, _HANDLER_MARK, False)]


def configure_logging(level: str = None, log_dir: str = None) -> logging.Logger:
    """Attach the console and file handlers to the root logger once. Later calls only adjust the level."""
    level = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(level)

    ours = _own_handlers(root)
    if ours:
        for handler in ours:
            handler.setLevel(level)
        return root

    log_dir = log_dir or settings.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    file_handler = RotatingFileHandler(
        filename=os.path.join(log_dir, settings.LOG_FILE),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    for handler in (console, file_handler):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return root


def get_logger(name: str) -> logging.Logger:
    """Named logger for a module. Sets up handlers on first use."""
    if not _own_handlers(logging.getLogger()):
        configure_logging()
    return logging.getLogger(name)
