"""Centralised logging configuration for mitmconf."""
from __future__ import annotations

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_installed: list[logging.Handler] = []


def setup_logging(
    debug: bool = False,
    silent: bool = False,
    logfile: Optional[str] = None,
) -> None:
    """Configure the root ``mitmconf`` logger.

    ``debug`` wins over ``silent``. When ``logfile`` is given every record
    is also appended to that file.  Handlers installed by a previous call
    are replaced, so the pipeline can reconfigure after parsing.
    """
    logger = logging.getLogger("mitmconf")
    for handler in _installed:
        logger.removeHandler(handler)
        handler.close()
    _installed.clear()

    if debug:
        level = logging.DEBUG
    elif silent:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if logfile:
        handlers.append(logging.FileHandler(logfile, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        _installed.append(handler)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``mitmconf`` namespace."""
    return logging.getLogger(f"mitmconf.{name}")
