"""Logging for ``statement_extraction``.

Pipeline modules log through ``get_logger("statement_extraction.<module>")``
with ``event key=value`` messages and never attach handlers. Output is wired
once, by the CLI or a host service, through :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "statement_extraction"
LEVEL_ENV = "STATEMENT_EXTRACTION_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured_handler: logging.Handler | None = None


def resolve_level(level: int | str | None = None) -> int:
    """Map ``level`` (or ``$STATEMENT_EXTRACTION_LOG_LEVEL``) to a numeric level.

    Unknown names fall back to ``INFO``.
    """

    if level is None:
        level = os.getenv(LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Attach one stream handler to the package logger; later calls are no-ops.

    Returns the active handler. ``stream`` defaults to the current
    ``sys.stderr``.
    """

    global _configured_handler
    if _configured_handler is not None:
        return _configured_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(h)

    resolved = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    logger.propagate = False

    _configured_handler = handler
    return handler


def reset_logging() -> None:
    """Detach the handler installed by :func:`configure_logging`."""

    global _configured_handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if _configured_handler is not None:
        logger.removeHandler(_configured_handler)
        _configured_handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _configured_handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging", "resolve_level"]
