"""Card number detection with Luhn validation."""

import re

from card_handoff.domain.normalize import normalize_digits
from card_handoff.domain.text import MAX_CARD_DIGITS, MIN_CARD_DIGITS

_GROUPED_DIGITS = re.compile(r"(?:[0-9][ -]?){13,16}")
_NON_DIGITS = re.compile(r"[^0-9]")


def luhn_valid(digits: str) -> bool:
    """Return True when a digit string passes the mod-10 checksum."""
    if not digits or not (digits.isascii() and digits.isdigit()):
        return False
    total = 0
    for offset, char in enumerate(reversed(digits)):
        digit = int(char)
        if offset % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def extract_card_number(text: str) -> str:
    """Return the first plausible card number in text, or an empty string.

    Separated digit groups are tried in textual order first. When none passes
    the checksum, every window of the undifferentiated digit stream is tried,
    earliest start first and longest length first.
    """
    normalized = normalize_digits(text or "")
    for match in _GROUPED_DIGITS.finditer(normalized):
        digits = _NON_DIGITS.sub("", match.group(0))
        if MIN_CARD_DIGITS <= len(digits) <= MAX_CARD_DIGITS and luhn_valid(digits):
            return digits
    return _scan_digit_stream(_NON_DIGITS.sub("", normalized))


def _scan_digit_stream(digits: str) -> str:
    for start in range(len(digits) - MIN_CARD_DIGITS + 1):
        longest = min(MAX_CARD_DIGITS, len(digits) - start)
        for length in range(longest, MIN_CARD_DIGITS - 1, -1):
            candidate = digits[start : start + length]
            if luhn_valid(candidate):
                return candidate
    return ""
