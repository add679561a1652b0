"""Expiry date extraction with FROM/THRU disambiguation.

Cards often print both an issue date and an expiry date. Each date candidate
is scored by a set of independent rules that look at nearby keywords; the
rules are composed by ``score_candidate``.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from card_handoff.domain.normalize import normalize_digits
from card_handoff.domain.text import split_lines

_DATE_CANDIDATE = re.compile(r"([0O][1-9]|1[0-2])\s*[-/]\s*([0-9OQDIL|SBZG]{2,4})")
THRU_KEYWORDS = re.compile(
    r"(VALID\s*THRU|VALIDTHRU|THRU|THROUGH|\bEXP\b|EXPIRY|EXPIRES?"
    r"|MM\s*/?\s*YY|MONTH\s*/?\s*YEAR)"
)
FROM_KEYWORDS = re.compile(r"(VALID\s*FROM|VALIDFROM|\bFROM\b|ISSUED?|SINCE|START)")

_MONTH = re.compile(r"^(0[1-9]|1[0-2])$")
_YEAR = re.compile(r"^[0-9]{2,4}$")

THRU_PROXIMITY_MAX = 80
FROM_PROXIMITY_MAX = 90
AFTER_THRU_BONUS = 16
AFTER_FROM_PENALTY = 24
PREVIOUS_LINE_THRU_BONUS = 22
PREVIOUS_LINE_FROM_PENALTY = 18
NEXT_LINE_BONUS = 8


@dataclass(frozen=True)
class DateCandidate:
    """A validated MM/YY value found at a position in a line."""

    expiry: str
    line_index: int
    position: int

    @property
    def sort_key(self) -> tuple[int, int]:
        month, year = self.expiry.split("/")
        return int(year), int(month)


@dataclass(frozen=True)
class DateContext:
    """Everything a scoring rule may inspect for one candidate."""

    candidate: DateCandidate
    line: str
    previous_line: str
    next_line: str
    thru_positions: tuple[int, ...]
    from_positions: tuple[int, ...]


ScoringRule = Callable[[DateContext], int]


def to_expiry(month_raw: str, year_raw: str) -> str:
    """Build an MM/YY string from raw OCR groups, or return ''."""
    month = normalize_digits(month_raw)
    year = normalize_digits(year_raw)
    if not _MONTH.match(month) or not _YEAR.match(year):
        return ""
    return f"{month}/{year[-2:]}"


def find_dates(line: str, line_index: int = 0) -> list[DateCandidate]:
    """Return the valid date candidates of a line in scan order."""
    candidates = []
    for match in _DATE_CANDIDATE.finditer(line):
        expiry = to_expiry(match.group(1), match.group(2))
        if expiry:
            candidates.append(
                DateCandidate(
                    expiry=expiry, line_index=line_index, position=match.start()
                )
            )
    return candidates


def _keyword_positions(line: str, pattern: re.Pattern[str]) -> tuple[int, ...]:
    return tuple(match.start() for match in pattern.finditer(line))


def _nearest_distance(position: int, positions: tuple[int, ...]) -> int | None:
    if not positions:
        return None
    return min(abs(position - keyword) for keyword in positions)


def thru_proximity(context: DateContext) -> int:
    distance = _nearest_distance(context.candidate.position, context.thru_positions)
    if distance is None:
        return 0
    return max(0, THRU_PROXIMITY_MAX - distance)


def from_proximity(context: DateContext) -> int:
    distance = _nearest_distance(context.candidate.position, context.from_positions)
    if distance is None:
        return 0
    return -max(0, FROM_PROXIMITY_MAX - distance)


def after_thru_keyword(context: DateContext) -> int:
    if context.thru_positions and context.candidate.position >= min(
        context.thru_positions
    ):
        return AFTER_THRU_BONUS
    return 0


def after_from_keyword(context: DateContext) -> int:
    if context.from_positions and context.candidate.position >= min(
        context.from_positions
    ):
        return -AFTER_FROM_PENALTY
    return 0


def previous_line_keywords(context: DateContext) -> int:
    score = 0
    if THRU_KEYWORDS.search(context.previous_line):
        score += PREVIOUS_LINE_THRU_BONUS
    if FROM_KEYWORDS.search(context.previous_line):
        score -= PREVIOUS_LINE_FROM_PENALTY
    return score


def next_line_keywords(context: DateContext) -> int:
    score = 0
    if THRU_KEYWORDS.search(context.next_line):
        score += NEXT_LINE_BONUS
    if FROM_KEYWORDS.search(context.next_line):
        score -= NEXT_LINE_BONUS
    return score


EXPIRY_RULES: tuple[ScoringRule, ...] = (
    thru_proximity,
    from_proximity,
    after_thru_keyword,
    after_from_keyword,
    previous_line_keywords,
    next_line_keywords,
)


def score_candidate(
    context: DateContext, rules: tuple[ScoringRule, ...] = EXPIRY_RULES
) -> int:
    """Sum the score deltas of every rule for one candidate."""
    return sum(rule(context) for rule in rules)


def paired_range_expiry(lines: list[str]) -> str:
    """Return the THRU date of a 'VALID FROM .. THRU ..' pair, or ''.

    FROM conventionally precedes THRU, so the last date of the pair wins.
    The dates may sit on the keyword line or on the line right below it.
    """
    for index, line in enumerate(lines):
        if not (FROM_KEYWORDS.search(line) and THRU_KEYWORDS.search(line)):
            continue
        same_line = find_dates(line, index)
        if len(same_line) >= 2:
            return same_line[-1].expiry
        if not same_line and index + 1 < len(lines):
            next_line = find_dates(lines[index + 1], index + 1)
            if len(next_line) >= 2:
                return next_line[-1].expiry
    return ""


def extract_expiry(text: str) -> str:
    """Return the most plausible expiry date as MM/YY, or an empty string."""
    lines = split_lines(text)
    paired = paired_range_expiry(lines)
    if paired:
        return paired

    scored: list[tuple[int, DateCandidate]] = []
    for index, line in enumerate(lines):
        thru_positions = _keyword_positions(line, THRU_KEYWORDS)
        from_positions = _keyword_positions(line, FROM_KEYWORDS)
        previous_line = lines[index - 1] if index > 0 else ""
        next_line = lines[index + 1] if index + 1 < len(lines) else ""
        for candidate in find_dates(line, index):
            context = DateContext(
                candidate=candidate,
                line=line,
                previous_line=previous_line,
                next_line=next_line,
                thru_positions=thru_positions,
                from_positions=from_positions,
            )
            scored.append((score_candidate(context), candidate))

    if not scored:
        return ""
    distinct = {candidate.expiry for _, candidate in scored}
    if len(distinct) > 1:
        latest = max((candidate for _, candidate in scored), key=lambda c: c.sort_key)
        return latest.expiry
    _, best = max(
        scored,
        key=lambda item: (item[0], item[1].line_index, item[1].position),
    )
    return best.expiry
