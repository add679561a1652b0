"""Domain models for handoff sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from card_handoff.domain.cards import CardRecord


class SessionStatus(str, Enum):
    """Lifecycle states of a live session."""

    PENDING = "pending"
    READY = "ready"


@dataclass(frozen=True)
class Session:
    """A short-lived handoff between a desktop and a phone."""

    id: str
    created_at: datetime
    expires_at: datetime
    status: SessionStatus = SessionStatus.PENDING
    record: CardRecord | None = None
    delivered_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """Return True once the session's TTL has elapsed."""
        return self.expires_at <= now
