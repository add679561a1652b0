"""Logging configuration helpers."""

import logging
import re

from card_handoff.domain.cards import mask_card_number

_CARD_NUMBER = re.compile(r"(?<![0-9])(?:[0-9][ -]?){12,18}[0-9](?![0-9])")


class CardNumberRedactor(logging.Filter):
    """Mask anything shaped like a card number before it is emitted."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _CARD_NUMBER.sub(_mask_match, message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def _mask_match(match: re.Match[str]) -> str:
    return mask_card_number(re.sub(r"[^0-9]", "", match.group(0)))


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging with a single redacting stream handler."""
    logger = logging.getLogger("card_handoff")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    handler.addFilter(CardNumberRedactor())
    logger.addHandler(handler)
    logger.propagate = False
