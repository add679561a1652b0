"""Google Cloud Vision REST client used as a text recognizer."""

import base64
from dataclasses import dataclass

import httpx

from card_handoff.domain.recognition import BatchAnnotateResponse
from card_handoff.services.recognition import TextRecognizer

DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1"


@dataclass
class GoogleVisionRecognizer(TextRecognizer):
    """HTTPX-backed document text detection."""

    api_key: str
    endpoint: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, api_key: str, endpoint: str = DEFAULT_ENDPOINT
    ) -> "GoogleVisionRecognizer":
        """Create a recognizer with a managed httpx session."""
        return cls(
            api_key=api_key,
            endpoint=endpoint.rstrip("/"),
            http_client=httpx.AsyncClient(),
        )

    async def recognize(self, image_bytes: bytes) -> str:
        """Run DOCUMENT_TEXT_DETECTION and return the full text annotation."""
        payload = {
            "requests": [
                {
                    "image": {"content": base64.b64encode(image_bytes).decode("ascii")},
                    "features": [{"type": "DOCUMENT_TEXT_DETECTION"}],
                }
            ]
        }
        response = await self.http_client.post(
            f"{self.endpoint}/images:annotate",
            params={"key": self.api_key},
            json=payload,
            timeout=20,
        )
        response.raise_for_status()
        batch = BatchAnnotateResponse.model_validate(response.json())
        if not batch.responses:
            return ""
        result = batch.responses[0]
        if result.error and result.error.message:
            raise RuntimeError(f"Cloud Vision error: {result.error.message}")
        if result.full_text_annotation is None:
            return ""
        return result.full_text_annotation.text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
