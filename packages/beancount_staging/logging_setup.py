"""Logging for ``beancount_staging``.

Library modules take their logger from ``get_logger("beancount_staging.<module>")``
and never attach handlers. The entry point (the CLI, or a host application
embedding the live state) calls ``configure_logging`` once.

Records may carry an ``error_kind`` attribute (passed through ``extra=``) that
classifies a failure for whoever reads the log; the commit path uses it to
mark internal invariant violations as ``commit_invariant``. The formatter
installed here appends it to the line as ``[error_kind=...]``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "beancount_staging"
LOG_LEVEL_ENV_VAR = "BEANCOUNT_STAGING_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured_handler: logging.Handler | None = None


class ErrorKindFormatter(logging.Formatter):
    """Formatter that tags records carrying ``error_kind``."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        kind = getattr(record, "error_kind", None)
        if kind:
            line = f"{line} [error_kind={kind}]"
        return line


def resolve_level(level: int | str | None = None) -> int:
    """Turn an explicit level, or the environment, into a numeric level.

    Unknown names fall back to INFO rather than failing startup.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV_VAR) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    mapped = logging.getLevelNamesMapping().get(name)
    return mapped if mapped is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Attach the package handler; later calls return the existing one.

    ``stream`` defaults to ``sys.stderr`` at call time so ``diff`` output on
    stdout stays clean.
    """

    global _configured_handler
    if _configured_handler is not None:
        return _configured_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in [h for h in logger.handlers if isinstance(h, logging.NullHandler)]:
        logger.removeHandler(h)

    numeric = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(ErrorKindFormatter(fmt or DEFAULT_FORMAT))
    handler.setLevel(numeric)

    logger.addHandler(handler)
    logger.setLevel(numeric)
    logger.propagate = False

    _configured_handler = handler
    return handler


def get_logger(name: str) -> logging.Logger:
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if _configured_handler is None and not pkg.handlers:
        pkg.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = [
    "PACKAGE_LOGGER",
    "LOG_LEVEL_ENV_VAR",
    "ErrorKindFormatter",
    "resolve_level",
    "configure_logging",
    "get_logger",
]
