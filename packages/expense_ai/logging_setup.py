"""Logging for the ``expense_ai`` package.

Library modules call ``get_logger("expense_ai.<module>")`` and never attach
handlers; output stays silent until an entrypoint calls
:func:`configure_logging`.

The CLI configures a single ``StreamHandler`` on the ``"expense_ai"`` logger.
Calling :func:`configure_logging` again only changes the level, so repeated
in-process invocations (tests, notebooks) never stack handlers. The HTTP
transport loggers used by the OpenAI SDK emit one INFO line per request;
they are held at WARNING unless the package runs at DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "expense_ai"
_LEVEL_ENV = "EXPENSE_AI_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_TRANSPORT_LOGGERS: tuple[str, ...] = ("httpx", "openai")

_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv(_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Route package logs to ``stream`` at ``level``.

    ``level`` accepts an ``int`` or a level name; ``None`` falls back to
    ``EXPENSE_AI_LOG_LEVEL`` and then INFO. ``fmt`` and ``stream`` only apply
    on the first call.
    """

    global _handler
    resolved = _parse_level(level)
    logger = logging.getLogger(_PKG_LOGGER_NAME)

    if _handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = logging.StreamHandler(stream)
        _handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False

    _handler.setLevel(resolved)
    logger.setLevel(resolved)

    transport_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
