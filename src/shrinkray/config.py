"""Environment-based configuration for shrinkray."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from SHRINKRAY_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SHRINKRAY_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Authentication (None = disabled)
    api_key: str | None = None

    # Worker pool: slots run in parallel, callers wait up to queue_timeout
    # seconds for one (None = wait forever)
    max_workers: int = Field(default=4, ge=1)
    queue_timeout: float | None = Field(default=5.0, gt=0)

    # Input limits
    max_file_size: int = Field(default=52_428_800, ge=1)
    max_image_pixels: int = Field(default=178_956_970, ge=1)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
