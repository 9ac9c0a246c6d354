"""Service settings, read from the environment and an optional .env file."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

OcrEngineName = Literal["tesseract", "google_vision"]


class Settings(BaseSettings):
    """Receiptscan settings. Every field maps to an upper-case env var."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Recognition
    ocr_engine: OcrEngineName = "tesseract"
    ocr_language: str = Field(
        default="eng",
        description="Tesseract language code, '+'-joined for several (e.g. 'deu+eng')",
    )
    tesseract_cmd: str | None = Field(
        default=None,
        description="tesseract executable, when it is not on PATH",
    )
    ocr_timeout_seconds: float = Field(default=0, ge=0, description="0 disables the timeout")
    google_cloud_credentials: Path | None = Field(
        default=None,
        description="Service account key for the google_vision engine",
    )

    # Extraction
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Reported by the scan endpoint when no currency was detected",
    )

    # Uploads
    max_file_size_mb: int = Field(default=10, ge=1, le=100)
    upload_dir: Path = Path("uploads")
    max_concurrent_scans: int = Field(
        default=4,
        ge=1,
        description="Pipeline runs allowed in flight at once",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        description="JSON list or comma-separated origins",
    )

    @field_validator("default_currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def split_origins(cls, value: Any) -> list[str]:
        if not isinstance(value, str):
            return list(value)
        raw = value.strip()
        items = json.loads(raw) if raw.startswith("[") else raw.split(",")
        return [str(origin).strip() for origin in items if str(origin).strip()]

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, parsed once."""
    return Settings()
