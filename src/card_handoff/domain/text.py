"""Line-oriented helpers shared by the field extractors."""

import re
from dataclasses import dataclass

DATE_PATTERN = re.compile(r"(0[1-9]|1[0-2])\s*[/-]\s*([0-9]{2}|[0-9]{4})")
ANCHOR_PATTERN = re.compile(
    r"(VALID|THRU|THROUGH|EXP|MONTH|YEAR|MM/?YY|DEBIT|CREDIT|CARD)"
)
_NON_DIGITS = re.compile(r"[^0-9]")

MIN_CARD_DIGITS = 13
MAX_CARD_DIGITS = 16


def split_lines(text: str) -> list[str]:
    """Return upper-cased, trimmed, non-empty lines."""
    return [line.strip() for line in (text or "").upper().splitlines() if line.strip()]


@dataclass(frozen=True)
class LineLayout:
    """Indices of structurally interesting lines in recognized text."""

    number_lines: tuple[int, ...]
    expiry_lines: tuple[int, ...]
    anchor_lines: tuple[int, ...]


def locate_lines(lines: list[str]) -> LineLayout:
    """Find number, expiry and anchor lines among upper-cased lines."""
    number_lines: list[int] = []
    expiry_lines: list[int] = []
    anchor_lines: list[int] = []
    for index, line in enumerate(lines):
        has_date = DATE_PATTERN.search(line) is not None
        if has_date or ANCHOR_PATTERN.search(line):
            anchor_lines.append(index)
        digit_count = len(_NON_DIGITS.sub("", line))
        if MIN_CARD_DIGITS <= digit_count <= MAX_CARD_DIGITS:
            number_lines.append(index)
        if has_date:
            expiry_lines.append(index)
    return LineLayout(
        number_lines=tuple(number_lines),
        expiry_lines=tuple(expiry_lines),
        anchor_lines=tuple(anchor_lines),
    )


def nearest_index(target: int, indices: tuple[int, ...]) -> int | None:
    """Return the index closest to target; earlier wins on ties."""
    best: int | None = None
    for index in indices:
        if best is None or abs(index - target) < abs(best - target):
            best = index
    return best
