"""
Logging configuration for the shop backend.

Provides a centralized logger; the level is taken from LOG_LEVEL.
"""
import logging
import sys

from config import settings

LOG_LEVEL = settings.log_level
logger = logging.getLogger("shop")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(LOG_LEVEL)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

# Avoid duplicate lines through the root logger
logger.propagate = False


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (will be appended to 'shop')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"shop.{name}")
    return logger
