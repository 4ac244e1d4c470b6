"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    record_store: str = "memory"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    allowed_sandboxes: str | None = None
    api_base_url: str = "http://localhost:8000"
    camera_device_index: int = 0
    camera_width: int = 640
    camera_height: int = 480
    camera_facing_mode: str = "environment"
    scan_interval_ms: int = 100
    scan_max_in_flight: int = 2
    decoder_symbologies: str = "CODE128,EAN13,EAN8,CODE39,CODE93"
    preferences_path: str = ".checkin_kiosk.json"
    history_ttl_seconds: int = 30
    history_limit: int = 50
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_sandboxes(raw: str | None) -> set[str] | None:
    """Parse the sandbox allow-list from env. None means any tag is accepted."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    tags = {chunk.strip() for chunk in cleaned.split(",") if chunk.strip()}
    return tags or None


def parse_symbologies(raw: str) -> list[str]:
    """Parse a comma-separated list of barcode symbology names."""
    return [chunk.strip().upper() for chunk in raw.split(",") if chunk.strip()]
