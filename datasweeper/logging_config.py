"""Centralized logging configuration for datasweeper."""

import logging
import sys
from typing import Optional

from datasweeper.exceptions import ConfigurationError

ROOT_LOGGER_NAME = "datasweeper"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    verbose: bool = False,
) -> logging.Logger:
    """Configure application-wide logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
        verbose: If True, sets level to DEBUG

    Returns:
        Configured logger instance

    Raises:
        ConfigurationError: If level is not one of LOG_LEVELS

    Example:
        >>> logger = setup_logging(verbose=True)
        >>> logger.info("Cleanup started")
    """
    if level.upper() not in LOG_LEVELS:
        raise ConfigurationError(f"Unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}")

    log_level = logging.DEBUG if verbose else getattr(logging, level.upper())

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates on warm invocations
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(console_formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance under the datasweeper hierarchy

    Example:
        >>> get_logger("datasweeper.cleanup.reconciler").name
        'datasweeper.cleanup.reconciler'
        >>> get_logger("retry").name
        'datasweeper.retry'
    """
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
