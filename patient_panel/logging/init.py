from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Labeled console logging for the panel and the Flask dev server.

Every line is `LABEL message`, LABEL being one of DEBUG, INFO, WARN, ERROR,
CRITICAL or SUMMARY. The `patient_panel` logger (parent of every module's
`logging.getLogger(__name__)`) and Werkzeug's request logger share a single
stdout handler, so request lines and workflow lines read the same.
"""

__all__ = [
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

SUMMARY_LEVEL = 25  # between INFO and WARNING

LOGGER_NAME = "patient_panel"
REQUEST_LOGGER_NAME = "werkzeug"

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """`LABEL message`; WARNING is shortened to WARN."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        line = f"{label} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def _apply_level(level: int) -> None:
    for name in (LOGGER_NAME, REQUEST_LOGGER_NAME):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for h in logger.handlers:
            h.setLevel(level)


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Configure the panel loggers once; later calls only raise verbosity.

    Args:
        debug: switch both loggers to DEBUG, even when already configured.
        stream: output stream, stdout by default.

    Returns:
        The `patient_panel` logger.
    """
    global _configured

    if _configured is None:
        logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(LabeledFormatter())
        handler.setLevel(logging.INFO)
        _attach(logging.getLogger(LOGGER_NAME), handler, logging.INFO)
        _attach(logging.getLogger(REQUEST_LOGGER_NAME), handler, logging.INFO)
        _configured = logging.getLogger(LOGGER_NAME)

    if debug:
        _apply_level(logging.DEBUG)
    return _configured


def get_logger() -> logging.Logger:
    return _configured or setup_logging()


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured state so the next setup starts over (tests)."""
    global _configured
    _configured = None
