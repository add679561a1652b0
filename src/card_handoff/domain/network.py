"""Card network classification by leading digits."""

import re

from card_handoff.domain.cards import CardType

# Evaluated in order; the first matching prefix decides.
_NETWORK_PREFIXES: tuple[tuple[re.Pattern[str], CardType], ...] = (
    (re.compile(r"^4"), CardType.VISA),
    (re.compile(r"^(5[1-5]|2(2[2-9]|[3-6][0-9]|7[01]|720))"), CardType.MASTERCARD),
    (re.compile(r"^6011"), CardType.DISCOVER),
    (re.compile(r"^(60|65|81|82|508)"), CardType.RUPAY),
    (re.compile(r"^3[47]"), CardType.AMEX),
    (re.compile(r"^65"), CardType.DISCOVER),
)

_NON_DIGITS = re.compile(r"[^0-9]")


def detect_card_type(card_number: str) -> CardType:
    """Classify a card number into its issuing network."""
    digits = _NON_DIGITS.sub("", card_number or "")
    for pattern, card_type in _NETWORK_PREFIXES:
        if pattern.match(digits):
            return card_type
    return CardType.UNKNOWN
