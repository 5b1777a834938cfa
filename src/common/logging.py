"""Structured logging configuration for the post corpus tools."""

from __future__ import annotations

import logging
import sys

# Names of loggers configured through setup_logging()
_configured: set[str] = set()


def setup_logging(
    level: int = logging.INFO,
    module_name: str = "postcorpus",
) -> logging.Logger:
    """Configure and return a logger with consistent formatting.

    Args:
        level: Logging level (default INFO).
        module_name: Name for the logger instance.

    Returns:
        Configured logger.
    """
    logger = logging.getLogger(module_name)

    if logger.handlers:
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    _configured.add(module_name)

    return logger


def set_level(level: int) -> None:
    """Change the level of every logger created by setup_logging()."""
    for name in _configured:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
