"""Logging for the ``ledger_analysis`` package.

Two helpers:

- ``configure_logging(...)``: install one ``StreamHandler`` on the package
  logger (``"ledger_analysis"``). The CLI calls it from its root callback;
  host applications may call it themselves or attach their own handlers.
- ``get_logger(name)``: return a module logger. Until something configures
  output, the package logger carries a ``NullHandler`` so library use stays
  silent.

The level comes from the ``level`` argument, else ``LEDGER_ANALYSIS_LOG_LEVEL``
(read through :func:`ledger_analysis.config.get_log_level`). Data-quality
findings (skipped rows, summary mismatches, the opening-balance double count)
are logged at WARNING; pipeline completion at DEBUG.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

from .config import get_log_level

_PKG_LOGGER_NAME = "ledger_analysis"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# The handler installed by configure_logging(), if any.
_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    name = (level if level is not None else get_log_level()).strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    # getLevelName() returns "Level X" for unknown names.
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
    force: bool = False,
) -> None:
    """Send package log records to ``stream`` (default ``sys.stderr``).

    Only the first call has an effect unless ``force`` is set, in which case
    the previously installed handler is replaced.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        if not force:
            return
        logger.removeHandler(_handler)
        _handler = None

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False
    _handler = handler


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
