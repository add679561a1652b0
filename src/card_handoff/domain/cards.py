"""Card domain models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

MASK_GLYPH = "•"


class CardType(str, Enum):
    """Supported card networks."""

    VISA = "VISA"
    MASTERCARD = "MASTERCARD"
    RUPAY = "RUPAY"
    AMEX = "AMEX"
    DISCOVER = "DISCOVER"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class CardRecord:
    """Structured card fields extracted from one captured image."""

    card_number: str
    masked_card_number: str
    cardholder_name: str
    expiry_date: str
    card_type: CardType
    scanned_at: datetime


def mask_card_number(card_number: str) -> str:
    """Hide every digit but the last four, grouped in fours from the right."""
    if len(card_number) < 4:
        return ""
    masked = MASK_GLYPH * (len(card_number) - 4) + card_number[-4:]
    groups = []
    end = len(masked)
    while end > 0:
        groups.append(masked[max(0, end - 4) : end])
        end -= 4
    return " ".join(reversed(groups))
