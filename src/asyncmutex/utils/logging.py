"""Logging helpers with consistent formatting.

Library modules only create loggers; records propagate to whatever the
application configured. ``reconfigure`` attaches a console handler to the
package logger for programs that want the library to print on its own.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.logging import RichHandler


PACKAGE_LOGGER = "asyncmutex"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())

_console_handler: Optional[logging.Handler] = None


def _make_handler(*, rich: bool) -> logging.Handler:
    if rich:
        # RichHandler renders time and level itself.
        handler: logging.Handler = RichHandler(
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        return handler

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def reconfigure(level: int, *, rich: bool = True) -> logging.Handler:
    """Set the package log level and (re)attach the console handler."""
    global _console_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _console_handler is not None:
        logger.removeHandler(_console_handler)
    _console_handler = _make_handler(rich=rich)
    logger.addHandler(_console_handler)
    logger.setLevel(level)
    return _console_handler


def reset() -> None:
    """Drop the console handler and hand level control back to the application."""
    global _console_handler

    logger = logging.getLogger(PACKAGE_LOGGER)
    if _console_handler is not None:
        logger.removeHandler(_console_handler)
        _console_handler = None
    logger.setLevel(logging.NOTSET)
