"""Pipeline turning recognized card text into structured fields."""

from dataclasses import dataclass

from card_handoff.domain.card_number import extract_card_number
from card_handoff.domain.cardholder import extract_cardholder_name
from card_handoff.domain.cards import CardType
from card_handoff.domain.expiry import extract_expiry
from card_handoff.domain.network import detect_card_type
from card_handoff.domain.text import locate_lines, split_lines


@dataclass(frozen=True)
class CardFields:
    """Raw extraction output; every field may be empty."""

    card_number: str
    cardholder_name: str
    expiry_date: str
    card_type: CardType


@dataclass
class CardExtractionService:
    """Runs the four independent extractors over one recognized text."""

    def read_fields(self, text: str) -> CardFields:
        """Extract card fields; missing optional fields come back empty."""
        lines = split_lines(text)
        card_number = extract_card_number(text)
        return CardFields(
            card_number=card_number,
            cardholder_name=extract_cardholder_name(lines, locate_lines(lines)),
            expiry_date=extract_expiry(text),
            card_type=detect_card_type(card_number)
            if card_number
            else CardType.UNKNOWN,
        )
