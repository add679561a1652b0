"""Coordinates the desktop-to-phone card capture hand-off."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from card_handoff.domain.cards import CardRecord, mask_card_number
from card_handoff.domain.errors import (
    BaseUrlUnavailableError,
    ExtractionFailureError,
    InputError,
)
from card_handoff.domain.sessions import SessionStatus
from card_handoff.domain.text import MAX_CARD_DIGITS
from card_handoff.services.extraction import CardExtractionService
from card_handoff.services.recognition import RecognitionService
from card_handoff.services.sessions import SessionRegistry
from card_handoff.services.urls import desktop_url, mobile_url

ALLOWED_CONTENT_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/webp"}
)
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

_logger = logging.getLogger(__name__)


class QrRenderer(Protocol):
    """Interface for rendering a URL as a scannable image."""

    def render_data_url(self, data: str) -> str:
        """Return a data URL of an image encoding ``data``."""


@dataclass(frozen=True)
class HandoffTicket:
    """Everything the desktop needs to show the QR code and start polling."""

    session_id: str
    mobile_url: str
    desktop_url: str
    qr_code: str
    expires_in_sec: int


@dataclass(frozen=True)
class PollResult:
    """Snapshot of a session as seen by the polling desktop."""

    status: SessionStatus
    record: CardRecord | None = None
    delivered_at: datetime | None = None


@dataclass
class HandoffCoordinator:
    """Creates sessions, processes phone uploads and answers desktop polls."""

    registry: SessionRegistry
    recognition: RecognitionService
    extraction: CardExtractionService
    qr_renderer: QrRenderer
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    public_base_url: str | None = None

    def create_session(self, base_url: str) -> HandoffTicket:
        """Open a session and build the links for both devices."""
        if not base_url:
            raise BaseUrlUnavailableError()
        session = self.registry.create()
        desktop = desktop_url(base_url, session.id)
        mobile = mobile_url(base_url, session.id, return_to=desktop)
        return HandoffTicket(
            session_id=session.id,
            mobile_url=mobile,
            desktop_url=desktop,
            qr_code=self.qr_renderer.render_data_url(mobile),
            expires_in_sec=self.registry.ttl_seconds,
        )

    async def submit_scan(
        self,
        session_id: str | None,
        image_bytes: bytes | None,
        content_type: str | None = None,
    ) -> CardRecord:
        """Recognize an uploaded card image and store the result."""
        if not session_id:
            raise InputError("Missing sessionId")
        self.registry.lookup(session_id)
        self._validate_image(image_bytes, content_type)

        # The registry lock is not held while the recognizer runs.
        text = await self.recognition.recognize(image_bytes)
        fields = self.extraction.read_fields(text)
        if not fields.card_number:
            raise ExtractionFailureError()
        if len(fields.card_number) > MAX_CARD_DIGITS:
            raise ExtractionFailureError("Card number must be 16 digits or less.")

        masked = mask_card_number(fields.card_number)
        record = CardRecord(
            card_number=fields.card_number,
            masked_card_number=masked,
            cardholder_name=fields.cardholder_name,
            expiry_date=fields.expiry_date,
            card_type=fields.card_type,
            scanned_at=self.registry.clock(),
        )
        session = self.registry.attach_result(session_id, record)
        _logger.info(
            "Card scanned: session=%s card=%s type=%s",
            session_id,
            masked,
            fields.card_type.value,
        )
        return session.record or record

    def poll(self, session_id: str | None) -> PollResult:
        """Report whether the phone has delivered a card yet."""
        if not session_id:
            raise InputError("Missing sessionId")
        session = self.registry.lookup(session_id)
        if session.status is not SessionStatus.READY or session.record is None:
            return PollResult(status=SessionStatus.PENDING)
        delivered = self.registry.mark_delivered(session_id) or session
        return PollResult(
            status=SessionStatus.READY,
            record=session.record,
            delivered_at=delivered.delivered_at,
        )

    def diagnostics(self) -> dict[str, object]:
        """Report registry size and configured base URL."""
        return {
            "activeSessions": self.registry.active_count(),
            "publicBaseUrl": self.public_base_url or None,
        }

    def _validate_image(
        self, image_bytes: bytes | None, content_type: str | None
    ) -> None:
        if not image_bytes:
            raise InputError("No image uploaded")
        if content_type and content_type.lower() not in ALLOWED_CONTENT_TYPES:
            raise InputError(
                "Unsupported file type. Please upload JPEG, PNG, or WEBP image."
            )
        if len(image_bytes) > self.max_upload_bytes:
            raise InputError("Image is too large.")
