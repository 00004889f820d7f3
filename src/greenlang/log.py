"""Logging utilities for greenlang."""

import logging
import os
import sys
from typing import Optional


LOG_LEVEL_ENV = "GREENLANG_LOG_LEVEL"
PACKAGE_LOGGER = "greenlang"


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package logger."""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a stderr handler to the package logger.

    The level defaults to ``$GREENLANG_LOG_LEVEL`` and then to WARNING.
    Calling this twice does not add a second handler.
    """
    level_name = (level or os.getenv(LOG_LEVEL_ENV, "WARNING")).upper()
    resolved = getattr(logging, level_name, logging.WARNING)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolved)
    if not any(getattr(h, "_greenlang_console", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        handler._greenlang_console = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    for handler in logger.handlers:
        if getattr(handler, "_greenlang_console", False):
            handler.setLevel(resolved)
    return logger
