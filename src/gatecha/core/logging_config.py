"""Logging setup for the gateway process."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
HANDLER_NAME = "gatecha"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_log_level(level: str | None) -> int:
    """Map a textual level to a logging constant; unknown values fall back to INFO."""
    return _LEVELS.get((level or "").strip().lower(), logging.INFO)


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with a single stdout handler.

    Safe to call more than once; the handler installed by a previous call is replaced.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(parse_log_level(level))
    for existing in list(root_logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)

    # Uvicorn's access log duplicates the request line on every call.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
