"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from card_handoff.config import Settings
from card_handoff.containers import AppContainer
from card_handoff.services.extraction import CardExtractionService
from card_handoff.services.handoff import HandoffCoordinator, QrRenderer
from card_handoff.services.recognition import RecognitionService, TextRecognizer
from card_handoff.services.sessions import SessionRegistry

SAMPLE_CARD_TEXT = "4111 1111 1111 1111\nJOHN MICHAEL SMITH\nVALID THRU 09/26"
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"fake-jpeg-body"


@dataclass
class FakeClock:
    """Manually advanced clock."""

    now: datetime = field(default_factory=lambda: datetime(2026, 3, 1, 12, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass
class FakeRecognizer(TextRecognizer):
    """Recognizer returning canned text."""

    text: str = SAMPLE_CARD_TEXT
    error: Exception | None = None
    delay_seconds: float = 0.0
    on_call: Callable[[], None] | None = None
    calls: list[bytes] = field(default_factory=list)

    async def recognize(self, image_bytes: bytes) -> str:
        self.calls.append(image_bytes)
        if self.on_call is not None:
            self.on_call()
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.text


@dataclass
class FakeQrRenderer(QrRenderer):
    """QR renderer that echoes its input."""

    def render_data_url(self, data: str) -> str:
        return f"data:text/plain,{data}"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        public_base_url="https://cards.example.com",
        google_vision_api_key="vision-key",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def registry(clock: FakeClock) -> SessionRegistry:
    return SessionRegistry(ttl_seconds=300, sweep_interval_seconds=0.01, clock=clock)


@pytest.fixture
def coordinator(
    registry: SessionRegistry, recognizer: FakeRecognizer
) -> HandoffCoordinator:
    return HandoffCoordinator(
        registry=registry,
        recognition=RecognitionService(recognizer=recognizer, timeout_seconds=1.0),
        extraction=CardExtractionService(),
        qr_renderer=FakeQrRenderer(),
        public_base_url="https://cards.example.com",
    )


@pytest.fixture
def container(
    settings: Settings,
    registry: SessionRegistry,
    coordinator: HandoffCoordinator,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_registry=registry,
        handoff_coordinator=coordinator,
        close_resources=close_resources,
    )
