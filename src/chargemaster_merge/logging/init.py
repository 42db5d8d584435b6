from __future__ import annotations

import logging
import sys

"""Logging initialization with labeled prefixes.

Console lines carry a level label (INFO|WARN|ERROR|SUMMARY) followed by the
message. Library modules log through ``logging.getLogger(__name__)`` and
propagate into the ``chargemaster_merge`` logger configured here, so one
handler serves the whole package.

Debug mode (``--debug``) lowers the app logger and its handler to DEBUG and
adds the emitting module to DEBUG lines::

    DEBUG [reconciliation] resolved columns master=... client=...

Typical use::

    logger = setup_logging(debug=args.debug)
    logger.info("Reconciling client files from: ./data/clients")
    log_summary("files=2/2 success=2 failed=0 ...")
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "set_debug",
    "get_logger",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "chargemaster_merge"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formats records as ``LABEL message``.

    DEBUG records also name the emitting module (last dotted segment of the
    logger name) so engine traces can be told apart from orchestration ones.
    """

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        message = record.getMessage()
        if record.levelno == logging.DEBUG and record.name != LOGGER_NAME:
            module = record.name.rsplit(".", 1)[-1]
            return f"{level_label} [{module}] {message}"
        return f"{level_label} {message}"


def _apply_level(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the application logger and return it.

    The handler is installed once; later calls only adjust the level, so the
    CLI can call this again after parsing ``--debug``.

    Args:
        debug: True lowers logger and handler to DEBUG, False keeps INFO
    """
    global _logger

    level = logging.DEBUG if debug else logging.INFO
    if _logger is not None:
        _apply_level(_logger, level)
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(LOGGER_NAME)

    # Clear any existing handlers to avoid duplication
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _apply_level(logger, level)
    _logger = logger
    return logger


def set_debug(enabled: bool) -> logging.Logger:
    """Switch debug output on or off for the already configured logger."""
    logger = setup_logging(debug=enabled)
    if enabled:
        logger.debug("debug mode enabled")
    return logger


def get_logger() -> logging.Logger:
    """Return the application logger, configuring it on first use."""
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Emit ``message`` at the SUMMARY level (label added by the formatter)."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes.

    Handlers are detached too, so the next ``setup_logging`` starts from a
    clean logger bound to the current ``sys.stdout`` (pytest's capsys swaps it).
    """
    global _logger
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    _logger = None
