"""Tests for card network detection."""

import pytest

from card_handoff.domain.cards import CardType
from card_handoff.domain.network import detect_card_type


@pytest.mark.parametrize(
    ("number", "expected"),
    [
        ("4111111111111111", CardType.VISA),
        ("5500000000000004", CardType.MASTERCARD),
        ("2221000000000009", CardType.MASTERCARD),
        ("2720990000000000", CardType.MASTERCARD),
        ("6011000000000004", CardType.DISCOVER),
        ("340000000000009", CardType.AMEX),
        ("378282246310005", CardType.AMEX),
        ("6076000000000000", CardType.RUPAY),
        ("6521000000000000", CardType.RUPAY),
        ("8100000000000000", CardType.RUPAY),
        ("5081000000000000", CardType.RUPAY),
        ("9999000000000000", CardType.UNKNOWN),
        ("", CardType.UNKNOWN),
    ],
)
def test_detect_card_type(number: str, expected: CardType) -> None:
    assert detect_card_type(number) is expected


def test_detect_card_type_ignores_separators() -> None:
    assert detect_card_type("4111 1111 1111 1111") is CardType.VISA
