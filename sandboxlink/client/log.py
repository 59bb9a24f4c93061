"""Client logging setup.

Everything ends up in loguru.  The libraries underneath the client (httpx,
httpcore, anyio) emit through stdlib ``logging``; ``setup_logging`` installs
a root handler that re-emits those records on loguru, so an application
embedding the client gets one stream with one format.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from loguru import logger

_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Chatty at INFO: one line per HTTP request.
_QUIET_LOGGERS = ("httpx", "httpcore", "anyio")


def _loguru_level(record: logging.LogRecord) -> str | int:
    try:
        return logger.level(record.levelname).name
    except ValueError:
        return record.levelno


def _caller_depth() -> int:
    """Stack depth of the first frame outside the ``logging`` package."""
    frame, depth = logging.currentframe(), 2
    while frame is not None and frame.f_code.co_filename == logging.__file__:
        frame = frame.f_back
        depth += 1
    return depth


class _ToLoguru(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        logger.opt(depth=_caller_depth(), exception=record.exc_info).log(_loguru_level(record), record.getMessage())


def setup_logging(level: str = "INFO", *, sink: Any = sys.stderr) -> None:
    """Route all client logging to *sink* at *level*.

    Replaces any loguru handlers already installed, so calling it again (the
    CLI does, with the configured level) simply reconfigures.
    """
    level = level.upper()

    logger.remove()
    logger.add(sink, level=level, format=_FORMAT)

    logging.basicConfig(handlers=[_ToLoguru()], level=logging.NOTSET, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging configured: level={}", level)
