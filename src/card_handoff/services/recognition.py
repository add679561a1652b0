"""Text recognition service wrapping an external OCR backend."""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Protocol

from card_handoff.domain.errors import UpstreamFailureError, UpstreamTimeoutError

_logger = logging.getLogger(__name__)


class TextRecognizer(Protocol):
    """Interface for an OCR backend."""

    async def recognize(self, image_bytes: bytes) -> str:
        """Return the multi-line text recognized in an image."""


@dataclass
class RecognitionService:
    """Calls the recognizer with a deadline and normalizes its failures."""

    recognizer: TextRecognizer
    timeout_seconds: float = 15.0

    async def recognize(self, image_bytes: bytes) -> str:
        """Recognize text, raising upstream errors the API can map."""
        try:
            text = await asyncio.wait_for(
                self.recognizer.recognize(image_bytes),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            _logger.warning(
                "Text recognition timed out after %.1fs", self.timeout_seconds
            )
            raise UpstreamTimeoutError() from exc
        except Exception as exc:
            _logger.exception("Text recognition failed")
            raise UpstreamFailureError() from exc
        return text or ""


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
