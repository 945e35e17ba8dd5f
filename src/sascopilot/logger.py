"""
Diagnostic logging built on loguru.

Modules obtain a logger with ``logger = get_logger(__name__)``. Diagnostic
output goes to stderr and is kept apart from the chat transcript.
"""

import os
import sys

from loguru import logger as _logger

_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

_logger.configure(extra={"name": "sascopilot"})


def setup_logging(level: str = None):
    """Replace loguru's default sink with a single stderr sink at ``level``."""
    level = level or os.getenv("LOGURU_LEVEL", "WARNING")
    _logger.remove()
    _logger.add(sys.stderr, level=level, format=_FORMAT)


def get_logger(name: str):
    """Return a logger bound to the given module name."""
    return _logger.bind(name=name)
