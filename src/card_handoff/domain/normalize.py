"""Character normalization for OCR-confusable glyphs."""

import re

_DIGIT_LOOKALIKES = str.maketrans(
    {
        "O": "0",
        "Q": "0",
        "D": "0",
        "I": "1",
        "L": "1",
        "|": "1",
        "S": "5",
        "B": "8",
        "Z": "2",
        "G": "6",
    }
)

_NAME_LOOKALIKES = str.maketrans({"0": "O", "1": "I", "5": "S", "8": "B"})

_NON_LETTERS = re.compile(r"[^A-Z\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_digits(text: str) -> str:
    """Upper-case text and rewrite letters commonly misread for digits.

    Digits are fixed points of the mapping, so the function is idempotent.
    """
    return text.upper().translate(_DIGIT_LOOKALIKES)


def normalize_name_line(line: str) -> str:
    """Map digit confusions back to letters and reduce a line to words."""
    letters = line.upper().translate(_NAME_LOOKALIKES)
    letters = _NON_LETTERS.sub(" ", letters)
    return _WHITESPACE.sub(" ", letters).strip()
