"""Logging configuration for webrequest."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: int = logging.INFO,
    module_name: str = "webrequest",
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return the package logger.

    Every module logs through ``logging.getLogger(__name__)`` so records from
    ``webrequest.client.*`` propagate to the logger configured here.

    Args:
        level: Logging level (default INFO).
        module_name: Name for the logger instance.
        stream: Output stream. Defaults to stderr so CLI output on stdout
            stays machine-readable.

    Returns:
        Configured logger.
    """
    logger = logging.getLogger(module_name)

    if logger.handlers:
        logger.setLevel(level)
        for existing in logger.handlers:
            existing.setLevel(level)
        return logger

    logger.setLevel(level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)

    return logger
