"""Cardholder name extraction from recognized card text."""

import re
from collections.abc import Callable
from dataclasses import dataclass

from card_handoff.domain.normalize import normalize_name_line
from card_handoff.domain.text import LineLayout, nearest_index

BLOCKED_WORDS = frozenset(
    {
        "VALID",
        "THRU",
        "THROUGH",
        "FROM",
        "MONTH",
        "YEAR",
        "EXP",
        "EXPIRES",
        "CARD",
        "DEBIT",
        "CREDIT",
        "BANK",
        "VISA",
        "MASTERCARD",
        "RUPAY",
        "AMEX",
        "DISCOVER",
        "PLATINUM",
        "SIGNATURE",
        "CLASSIC",
        "GOLD",
        "WORLD",
        "ELECTRON",
        "PAY",
        "MEMBER",
        "SINCE",
        "CORP",
        "LIMITED",
        "LTD",
        "PRIVATE",
        "BUSINESS",
        "AZADI",
        "AMRIT",
        "MAHOTSAV",
        "INDIA",
    }
)
HONORIFICS = frozenset({"MR", "MRS", "MS", "MISS", "DR", "SHRI", "SMT"})

_VOWEL = re.compile(r"[AEIOU]")
_UPPER_WORDS = re.compile(r"^[A-Z\s]+$")
_REPEATED_LETTERS = re.compile(r"([A-Z])\1{2,}")


@dataclass(frozen=True)
class NameCandidate:
    """Words of one line that passed the shape filters."""

    words: tuple[str, ...]
    line_index: int

    @property
    def full_name(self) -> str:
        return " ".join(self.words)


@dataclass(frozen=True)
class NameContext:
    candidate: NameCandidate
    layout: LineLayout


NameRule = Callable[[NameContext], int]


def to_candidate(line: str, line_index: int) -> NameCandidate | None:
    """Apply the per-line shape filters; return None for non-names."""
    normalized = normalize_name_line(line)
    if not 5 <= len(normalized) <= 40:
        return None
    words = normalized.split(" ")
    if words and words[0] in HONORIFICS:
        words = words[1:]
    if not 2 <= len(words) <= 4:
        return None
    if any(not 2 <= len(word) <= 14 for word in words):
        return None
    if any(word in BLOCKED_WORDS for word in words):
        return None
    if not all(_VOWEL.search(word) for word in words):
        return None
    return NameCandidate(words=tuple(words), line_index=line_index)


def word_count(context: NameContext) -> int:
    count = len(context.candidate.words)
    if count in (2, 3):
        return 5
    if count == 4:
        return 2
    return 0


def word_length(context: NameContext) -> int:
    words = context.candidate.words
    average = sum(len(word) for word in words) / len(words)
    return 3 if 3 <= average <= 8 else 0


def uppercase_letters(context: NameContext) -> int:
    return 2 if _UPPER_WORDS.match(context.candidate.full_name) else 0


def anchor_proximity(context: NameContext) -> int:
    anchors = context.layout.anchor_lines
    if not anchors:
        return 0
    index = context.candidate.line_index
    distance = min(abs(anchor - index) for anchor in anchors)
    if distance <= 2:
        return 3
    if distance <= 4:
        return 1
    return 0


def below_card_number(context: NameContext) -> int:
    index = context.candidate.line_index
    nearest = nearest_index(index, context.layout.number_lines)
    if nearest is None:
        return 0
    if nearest < index <= nearest + 6:
        return 4
    if index < nearest:
        return -2
    return 0


def below_expiry(context: NameContext) -> int:
    index = context.candidate.line_index
    nearest = nearest_index(index, context.layout.expiry_lines)
    if nearest is not None and nearest < index <= nearest + 4:
        return 3
    return 0


def repeated_letters(context: NameContext) -> int:
    return -3 if _REPEATED_LETTERS.search(context.candidate.full_name) else 0


NAME_RULES: tuple[NameRule, ...] = (
    word_count,
    word_length,
    uppercase_letters,
    anchor_proximity,
    below_card_number,
    below_expiry,
    repeated_letters,
)


def score_name(context: NameContext, rules: tuple[NameRule, ...] = NAME_RULES) -> int:
    """Sum the score deltas of every rule for one candidate."""
    return sum(rule(context) for rule in rules)


def extract_cardholder_name(lines: list[str], layout: LineLayout) -> str:
    """Return the best-scoring name line, or '' when nothing scores above 0."""
    best_name = ""
    best_score: int | None = None
    for index, line in enumerate(lines):
        candidate = to_candidate(line, index)
        if candidate is None:
            continue
        score = score_name(NameContext(candidate=candidate, layout=layout))
        if best_score is None or score > best_score:
            best_score = score
            best_name = candidate.full_name
    if best_score is None or best_score <= 0:
        return ""
    return best_name
