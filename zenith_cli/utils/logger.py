"""Shared logger initialization for the CLI and the API layer.

Usage:
    from zenith_cli.utils.logger import get_logger
    log = get_logger(__name__)
    log.info("message")
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from rich.logging import RichHandler

_DEFAULT_HANDLER = RichHandler(rich_tracebacks=True, markup=False, show_path=False)

_FORMAT = "%(message)s"  # rich handler already adds time & level


def _env_level() -> int:
    name = os.getenv("ZENITH_LOG_LEVEL", "WARNING").upper()
    return getattr(logging, name, logging.WARNING)


def configure_logging(level: Optional[int] = None) -> None:
    """Idempotently configure root logger with a nicer handler."""
    root = logging.getLogger()
    if _DEFAULT_HANDLER in root.handlers:
        # Assume already configured
        return
    level = _env_level() if level is None else level
    root.setLevel(level)
    _DEFAULT_HANDLER.setLevel(level)
    _DEFAULT_HANDLER.setFormatter(logging.Formatter(_FORMAT))
    root.addHandler(_DEFAULT_HANDLER)


def set_level(level: int) -> None:
    configure_logging()
    logging.getLogger().setLevel(level)
    _DEFAULT_HANDLER.setLevel(level)


def get_logger(name: str = __name__, level: Optional[int] = None) -> logging.Logger:
    """Return a module-level logger (configuring root on first call)."""
    configure_logging()
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger
