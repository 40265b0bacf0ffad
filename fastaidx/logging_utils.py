"""Logging helpers for fastaidx."""

import logging

from fastaidx.config import LOG_FORMAT, env_log_level

LOGGER_NAME = "fastaidx"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Configure the root logger and return the package logger."""
    level = logging.DEBUG if verbose else logging.INFO
    override = env_log_level()
    if override is not None:
        level = logging.getLevelName(override)
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    return logger


def get_logger() -> logging.Logger:
    """Return the package logger."""
    return logging.getLogger(LOGGER_NAME)
