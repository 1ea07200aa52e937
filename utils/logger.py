"""
Shared logger utility for the retail customer analytics engine.
Provides a consistent logger configuration for all modules.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL_ENV_VAR = "ANALYTICS_LOG_LEVEL"
_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Returns a logger with the specified name, configured with a standard format.
    The level is INFO unless ``ANALYTICS_LOG_LEVEL`` names another standard level.
    If no name is provided, returns the root logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    level_name = os.getenv(LOG_LEVEL_ENV_VAR, "INFO").strip().upper()
    logger.setLevel(_LEVELS.get(level_name, logging.INFO))
    return logger
