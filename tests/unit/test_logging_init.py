from __future__ import annotations

import logging
from io import StringIO

from chargemaster_merge.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    set_debug,
    setup_logging,
)


def test_setup_logging_creates_logger_with_single_handler():
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)


def test_setup_logging_is_idempotent():
    assert setup_logging() is setup_logging()
    assert get_logger() is setup_logging()


def test_labeled_prefixes():
    captured = StringIO()
    logger = logging.getLogger("test_chargemaster_labels")
    logger.setLevel(logging.INFO)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    lines = captured.getvalue().strip().split("\n")
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_module_loggers_propagate_to_app_logger():
    app = setup_logging()
    child = logging.getLogger(f"{LOGGER_NAME}.services.reconciliation")
    assert child.parent is app or child.parent.name.startswith(LOGGER_NAME)


def test_setup_logging_debug_lowers_logger_and_handler():
    logger = setup_logging(debug=True)
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)

    # 再設定しても handler は増えない
    logger = setup_logging()
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.INFO


def test_set_debug_emits_marker_line(capsys):
    set_debug(True)
    assert "DEBUG debug mode enabled" in capsys.readouterr().out


def test_debug_lines_name_the_emitting_module():
    formatter = LabeledFormatter()
    record = logging.LogRecord(
        f"{LOGGER_NAME}.services.reconciliation", logging.DEBUG, __file__, 1, "stats %s", ("ok",), None
    )
    assert formatter.format(record) == "DEBUG [reconciliation] stats ok"

    record = logging.LogRecord(
        f"{LOGGER_NAME}.services.reconciliation", logging.INFO, __file__, 1, "done", None, None
    )
    assert formatter.format(record) == "INFO done"
