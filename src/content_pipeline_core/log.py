from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "content_pipeline_core"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO", *, stream=None) -> logging.Logger:  # noqa: ANN001
    """
    Attach a single stream handler to the package logger.

    Calling it again replaces the handler instead of stacking duplicates.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    resolved = logging.getLevelName((level or "INFO").upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    logger.setLevel(resolved)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger
