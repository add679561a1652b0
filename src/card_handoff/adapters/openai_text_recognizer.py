"""OpenAI Responses API client used as a text recognizer."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from card_handoff.domain.recognition import RecognizedText
from card_handoff.services.recognition import TextRecognizer, to_data_url

RECOGNITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"text": {"type": "string"}},
    "required": ["text"],
    "additionalProperties": False,
}

RECOGNITION_PROMPT = (
    "Transcribe every piece of printed or embossed text on this payment card. "
    "Keep the original line breaks and reading order. Do not correct, "
    "complete or explain anything."
)


@dataclass
class OpenAITextRecognizer(TextRecognizer):
    """Recognizer backed by an OpenAI vision model."""

    client: AsyncOpenAI
    model: str
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str,
        reasoning_effort: str | None = None,
        store: bool = False,
    ) -> "OpenAITextRecognizer":
        """Create an OpenAI text recognizer."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def recognize(self, image_bytes: bytes) -> str:
        """Call OpenAI Responses API with structured outputs."""
        request_payload: dict[str, object] = {
            "model": self.model,
            "input": [
                {
                    "role": "user",
                    "content": [
                        {"type": "input_text", "text": RECOGNITION_PROMPT},
                        {"type": "input_image", "image_url": to_data_url(image_bytes)},
                    ],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "card_text",
                    "strict": True,
                    "schema": RECOGNITION_SCHEMA,
                }
            },
            "store": self.store,
        }
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return RecognizedText.model_validate(json.loads(output_text)).text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
