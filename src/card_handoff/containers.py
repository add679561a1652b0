"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from card_handoff.adapters.google_vision_recognizer import GoogleVisionRecognizer
from card_handoff.adapters.openai_text_recognizer import OpenAITextRecognizer
from card_handoff.adapters.qr_renderer import QrCodeRenderer
from card_handoff.config import Settings, parse_recognizer
from card_handoff.services.extraction import CardExtractionService
from card_handoff.services.handoff import HandoffCoordinator
from card_handoff.services.recognition import RecognitionService
from card_handoff.services.sessions import SessionRegistry
from card_handoff.services.urls import parse_base_url


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_registry: SessionRegistry
    handoff_coordinator: HandoffCoordinator
    close_resources: Callable[[], Awaitable[None]]


def build_recognizer(
    settings: Settings,
) -> GoogleVisionRecognizer | OpenAITextRecognizer:
    """Create the recognizer selected by configuration."""
    backend = parse_recognizer(settings.recognizer)
    if backend == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY must be set for the openai recognizer.")
        return OpenAITextRecognizer.create(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            reasoning_effort=settings.openai_reasoning_effort,
            store=settings.openai_store,
        )
    if not settings.google_vision_api_key:
        raise ValueError(
            "GOOGLE_VISION_API_KEY must be set for the google recognizer."
        )
    return GoogleVisionRecognizer.create(
        api_key=settings.google_vision_api_key,
        endpoint=settings.google_vision_endpoint,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    recognizer = build_recognizer(resolved_settings)
    registry = SessionRegistry(
        ttl_seconds=resolved_settings.session_ttl_seconds,
        sweep_interval_seconds=resolved_settings.sweep_interval_seconds,
    )
    coordinator = HandoffCoordinator(
        registry=registry,
        recognition=RecognitionService(
            recognizer=recognizer,
            timeout_seconds=resolved_settings.recognition_timeout_seconds,
        ),
        extraction=CardExtractionService(),
        qr_renderer=QrCodeRenderer(),
        max_upload_bytes=resolved_settings.max_upload_bytes,
        public_base_url=parse_base_url(resolved_settings.public_base_url),
    )

    async def close_resources() -> None:
        await recognizer.close()

    return AppContainer(
        settings=resolved_settings,
        session_registry=registry,
        handoff_coordinator=coordinator,
        close_resources=close_resources,
    )
