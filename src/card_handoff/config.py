"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = _ENVIRONMENT
    port: int = 8000
    log_level: str = "INFO"
    public_base_url: str | None = None
    session_ttl_seconds: int = 300
    sweep_interval_seconds: float = 30.0
    recognition_timeout_seconds: float = 15.0
    max_upload_bytes: int = 10 * 1024 * 1024
    recognizer: str = "google"
    google_vision_api_key: str | None = None
    google_vision_endpoint: str = "https://vision.googleapis.com/v1"
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


def parse_recognizer(raw: str) -> str:
    """Normalize the configured recognizer backend name."""
    value = raw.strip().lower()
    if value in {"google", "google_vision", "vision"}:
        return "google"
    if value in {"openai", "llm"}:
        return "openai"
    raise ValueError(f"Unknown recognizer backend: {raw!r}")
