"""Diagnostic channel for check-versions.

Every diagnostic goes to stderr (or the supplied stream) so the version table
on stdout stays machine-scrapeable.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

ROOT_LOGGER = "check_versions"
CONSOLE_FORMAT = "[check-versions] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(threadName)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``check_versions.<name>``, or the package logger itself."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def _attach(logger: logging.Logger, handler: logging.Handler, fmt: str) -> None:
    handler.setLevel(logger.level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


def reset_logging() -> logging.Logger:
    """Detach and close package handlers and hand records back to the root logger."""
    logger = get_logger()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    return logger


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Route package diagnostics to ``stream`` (stderr) and optionally ``log_file``.

    Safe to call repeatedly; earlier handlers are replaced, not duplicated.
    The file sink records the worker thread name so interleaved requests can
    be told apart.
    """
    logger = reset_logging()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    _attach(logger, logging.StreamHandler(stream or sys.stderr), CONSOLE_FORMAT)
    if log_file is not None:
        _attach(logger, logging.FileHandler(log_file, encoding="utf-8"), FILE_FORMAT)
    return logger


__all__ = ["configure_logging", "get_logger", "reset_logging"]
