"""
MedStock Logging Configuration
Console output plus rotating log files under settings.LOG_DIR
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
from .config import settings

MB = 1024 * 1024

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(funcName)s() - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# child logger -> (file name, max size, backups)
MODULE_LOGS = {
    "database": ("database.log", 5 * MB, 3),
    "api": ("api.log", 10 * MB, 5),
    "business": ("business.log", 5 * MB, 3),
    "security": ("security.log", 10 * MB, 10),
}


def _rotating_handler(
    path: Path,
    max_bytes: int,
    backup_count: int,
    formatter: logging.Formatter,
    level: int = logging.NOTSET
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: Optional[str] = None,
    log_to_file: Optional[bool] = None,
    log_to_console: bool = True
) -> logging.Logger:
    """
    Configure the ``medstock`` logger tree

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL; defaults to settings.LOG_LEVEL
        log_to_file: write rotating files; defaults to settings.LOG_TO_FILE
        log_to_console: echo to stdout

    Calling it again replaces the previously installed handlers.
    """
    level = getattr(logging, (log_level or settings.LOG_LEVEL).upper(), logging.INFO)
    if log_to_file is None:
        log_to_file = settings.LOG_TO_FILE

    root = logging.getLogger("medstock")
    root.setLevel(level)
    root.handlers.clear()

    file_formatter = logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT)

    if log_to_console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level)
        console.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(console)

    log_dir = settings.LOG_DIR if log_to_file else None
    if log_dir is not None:
        log_dir.mkdir(exist_ok=True, parents=True)
        root.addHandler(_rotating_handler(log_dir / settings.LOG_FILE, 10 * MB, 5, file_formatter, level))
        root.addHandler(_rotating_handler(log_dir / settings.ERROR_LOG_FILE, 5 * MB, 3, file_formatter, logging.ERROR))

    for name, (filename, max_bytes, backups) in MODULE_LOGS.items():
        child = logging.getLogger(f"medstock.{name}")
        # login trail is kept even when the app runs at WARNING
        child.setLevel(logging.INFO if name == "security" else level)
        child.handlers.clear()
        if log_dir is not None:
            child.addHandler(_rotating_handler(log_dir / filename, max_bytes, backups, file_formatter))

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name"""
    return logging.getLogger(f"medstock.{name}")


__all__ = [
    'setup_logging',
    'get_logger',
]
