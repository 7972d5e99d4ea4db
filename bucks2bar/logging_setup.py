"""Logging for the ``bucks2bar`` package.

Modules log through ``get_logger(__name__)``. Only entrypoints (the dashboard
and ``scripts/import_backup.py``) call ``configure_logging()``.
"""

from __future__ import annotations

import logging
import os

PACKAGE_LOGGER = "bucks2bar"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())
_stream_handler: logging.Handler | None = None


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """Send package logs to stderr; safe to call on every Streamlit rerun.

    ``level`` defaults to ``BUCKS2BAR_LOG_LEVEL`` and then ``INFO``. Unknown
    level names fall back to ``INFO``.
    """
    global _stream_handler
    if level is None:
        level = os.getenv("BUCKS2BAR_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.strip().upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    if _stream_handler is None:
        _stream_handler = logging.StreamHandler()
        _stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_stream_handler)
        logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
