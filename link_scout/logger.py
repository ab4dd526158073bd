"""Logging for **LinkScout**.

Diagnostics go to *stderr* only: *stdout* carries result lines, so a
consumer piping the output never sees log text. Modules import the shared
instance::

    from link_scout.logger import logger
    logger.warning("[timeout] %s", url)

The CLI calls :func:`init_logging` once its options are parsed.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(message)s"
LOGGER_NAME: Final[str] = "LinkScout"

# rotation for --log-file
_LOG_FILE_BYTES: Final[int] = 2 * 1024 * 1024
_LOG_FILE_BACKUPS: Final[int] = 2


def init_logging(
    level: int | str = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the project logger: stderr, plus *log_file* if given."""
    formatter = logging.Formatter(log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                str(log_file),
                maxBytes=_LOG_FILE_BYTES,
                backupCount=_LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )

    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for old in list(lg.handlers):
        lg.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setFormatter(formatter)
        lg.addHandler(handler)
    lg.propagate = False
    return lg


logger: logging.Logger = init_logging()

__all__ = ["DEFAULT_FORMAT", "LOGGER_NAME", "init_logging", "logger"]
