"""Tests for card number detection."""

import pytest

from card_handoff.domain.card_number import extract_card_number, luhn_valid


@pytest.mark.parametrize(
    "digits",
    [
        "4111111111111111",
        "5500000000000004",
        "6011000000000004",
        "340000000000009",
        "4222222222222",
        "378282246310005",
    ],
)
def test_luhn_accepts_valid_numbers(digits: str) -> None:
    assert luhn_valid(digits)


@pytest.mark.parametrize(
    "digits",
    ["4111111111111112", "1234567890123", "", "41x1", "²", "４１１１１１１１１１１１１１１１"],
)
def test_luhn_rejects_invalid_numbers(digits: str) -> None:
    assert not luhn_valid(digits)


def test_extracts_grouped_number_among_noise() -> None:
    text = "BANK OF NOWHERE\n4111 1111 1111 1111\nMEMBER"

    assert extract_card_number(text) == "4111111111111111"


def test_extracts_dash_separated_number() -> None:
    assert extract_card_number("Card: 5500-0000-0000-0004 ") == "5500000000000004"


def test_extracts_fifteen_digit_amex() -> None:
    assert extract_card_number("3400 000000 00009") == "340000000000009"


def test_repairs_letter_confusions() -> None:
    assert extract_card_number("4III 1111 IIII 1111") == "4111111111111111"


def test_falls_back_to_digit_stream() -> None:
    assert extract_card_number("4111.1111.1111.1111") == "4111111111111111"


def test_first_valid_group_wins() -> None:
    text = "5500 0000 0000 0004\n4111 1111 1111 1111"

    assert extract_card_number(text) == "5500000000000004"


def test_returns_empty_without_enough_digits() -> None:
    assert extract_card_number("1234 5678") == ""
    assert extract_card_number("") == ""


def test_never_returns_more_than_sixteen_digits() -> None:
    result = extract_card_number("4111111111111111111111")

    assert 13 <= len(result) <= 16


@pytest.mark.parametrize("zero", [0xFF10, 0x0660, 0x06F0, 0x0966])
def test_ignores_non_ascii_digits(zero: int) -> None:
    text = "".join(
        char if char == " " else chr(zero + int(char)) for char in "4111 1111 1111 1111"
    )

    assert extract_card_number(text) == ""


def test_ascii_number_survives_non_ascii_neighbours() -> None:
    text = "٤١١١ ١١١١ ١١١١ ١١١١\n4111 1111 1111 1111"

    assert extract_card_number(text) == "4111111111111111"
