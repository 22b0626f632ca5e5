"""Logging configuration for poolkeeper.

Configures logging based on environment variables:
- POOLKEEPER_DEBUG: Enable debug logging (default: false)
"""

from __future__ import annotations

import logging
import os
import sys


def setup_logging(verbose: bool = False, debug: bool | None = None) -> logging.Logger:
    """Configure the poolkeeper logger.

    Args:
        verbose: Show progress messages (INFO) instead of warnings only.
        debug: Enable debug level. Defaults to POOLKEEPER_DEBUG env var.

    Returns:
        Root logger for poolkeeper.
    """
    if debug is None:
        debug = os.environ.get("POOLKEEPER_DEBUG", "").lower() in ("true", "1", "yes")

    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger("poolkeeper")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(level)
    logger.addHandler(handler)

    return logger
