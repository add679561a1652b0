"""Tests for logging configuration."""

import logging

import pytest

from card_handoff.app_logging import CardNumberRedactor, configure_logging


@pytest.fixture
def app_logger() -> logging.Logger:
    logger = logging.getLogger("card_handoff")
    logger.handlers.clear()
    return logger


def test_configure_logging_idempotent(app_logger: logging.Logger) -> None:
    configure_logging()
    configure_logging()

    assert len(app_logger.handlers) == 1
    assert app_logger.level == logging.INFO
    assert app_logger.propagate is False


def test_configure_logging_applies_level(app_logger: logging.Logger) -> None:
    configure_logging("debug")

    assert app_logger.level == logging.DEBUG


def test_handler_masks_card_numbers(app_logger: logging.Logger) -> None:
    configure_logging()
    record = logging.LogRecord(
        "card_handoff.services.handoff",
        logging.INFO,
        __file__,
        1,
        "Scanned %s for session %s",
        ("4111 1111 1111 1111", "abc-123"),
        None,
    )

    assert app_logger.handlers[0].filter(record)
    assert record.getMessage() == "Scanned •••• •••• •••• 1111 for session abc-123"


@pytest.mark.parametrize(
    "message",
    ["Session created: id=3f2c-11aa", "Active sessions: 12", "Upload of 1048576 bytes"],
)
def test_redactor_leaves_ordinary_messages(message: str) -> None:
    record = logging.LogRecord(
        "card_handoff", logging.INFO, __file__, 1, message, None, None
    )

    assert CardNumberRedactor().filter(record)
    assert record.getMessage() == message
