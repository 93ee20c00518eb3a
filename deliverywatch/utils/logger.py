"""Centralized logging configuration with file rotation."""

import logging
import os
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional


_loggers: dict[str, logging.Logger] = {}

CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(
    name: str,
    level: Optional[str] = None,
    log_dir: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with both console and file handlers.

    Level and directory fall back to the LOG_LEVEL and LOG_DIR environment
    variables. Loggers of one package share a log file named after the
    top-level package (``deliverywatch.access.scopes`` writes to
    ``deliverywatch.log``).

    Args:
        name: Logger name (typically module name)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger("deliverywatch.query", level="DEBUG")
        >>> logger.info("Listing deliveries...")
    """
    # Return existing logger if already configured
    if name in _loggers:
        return _loggers[name]

    level = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    log_dir = log_dir or os.getenv('LOG_DIR', 'logs')

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level))
    logger.propagate = False

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    # Console handler (INFO and above)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))

    # File handler (all levels, daily rotation, keep 30 days)
    log_file = log_path / f"{name.split('.')[0]}.log"
    file_handler = TimedRotatingFileHandler(
        log_file,
        when='midnight',
        interval=1,
        backupCount=30,
        encoding='utf-8',
        delay=True
    )
    file_handler.setLevel(getattr(logging, level))
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    _loggers[name] = logger

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get an existing logger or create a new one with default settings.

    Args:
        name: Logger name

    Returns:
        Logger instance

    Example:
        >>> logger = get_logger("deliverywatch.denylist")
        >>> logger.debug("Looking up address...")
    """
    if name in _loggers:
        return _loggers[name]
    return setup_logger(name)
