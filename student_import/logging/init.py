from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Console logging for import runs.

Every line is "<LABEL> <message>", LABEL being DEBUG, INFO, WARN, ERROR or
SUMMARY. Only the package logger "student_import" gets a handler; modules log
through logging.getLogger(__name__) and reach it by propagation.
"""

__all__ = [
    "SUMMARY_LEVEL",
    "LOGGER_NAME",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "reset_logging",
]

# sits between INFO (20) and WARNING (30) so it survives the default level
SUMMARY_LEVEL = 25

LOGGER_NAME = "student_import"

_LABELS: dict[int, str] = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
    SUMMARY_LEVEL: "SUMMARY",
}

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """"LABEL message", with any traceback on the following lines."""

    def format(self, record: logging.LogRecord) -> str:
        label = _LABELS.get(record.levelno, record.levelname)
        text = f"{label} {record.getMessage()}"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def _apply_level(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    for h in logger.handlers:
        h.setLevel(level)


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Attach the labelled stdout handler to the package logger.

    Calling it again only changes the level.

    Args:
        debug: emit DEBUG records as well
        stream: output stream (default: the current sys.stdout)

    Returns:
        The package logger
    """
    global _configured

    level = logging.DEBUG if debug else logging.INFO
    if _configured is not None:
        _apply_level(_configured, level)
        return _configured

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger(LOGGER_NAME)
    for stale in list(logger.handlers):
        logger.removeHandler(stale)

    console = logging.StreamHandler(stream or sys.stdout)
    console.setFormatter(LabeledFormatter())
    logger.addHandler(console)
    _apply_level(logger, level)
    # root handlers would print every line twice
    logger.propagate = False

    _configured = logger
    return logger


def get_logger() -> logging.Logger:
    return _configured if _configured is not None else setup_logging()


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Detach the handler and forget the configured logger (used by tests)."""
    global _configured
    if _configured is None:
        return
    for h in list(_configured.handlers):
        _configured.removeHandler(h)
    _configured.propagate = True
    _configured = None
