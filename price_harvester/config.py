"""Configuration for the price harvester using pydantic-settings.

All settings are driven by environment variables with the HARVESTER_ prefix,
e.g. ``HARVESTER_CONCURRENCY=32``. Settings are built once at startup and
passed down explicitly; worker code never reads the environment.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Harvester configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HARVESTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    concurrency: int = Field(default=128, gt=0)
    input_capacity: int = Field(default=1, gt=0)

    debug_dir: Path = Path("debug")

    user_agent: str = "price-harvester/0.1"
    accept_language: str = "es-AR,es;q=0.9,en;q=0.5"
    timeout_total: float = 30.0

    max_attempts: int = Field(default=10, gt=0)
    backoff_base: float = Field(default=0.3, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1)
    backoff_max: float = 30.0
    backoff_jitter: bool = True
    retry_statuses: List[int] = Field(default_factory=list)

    def ensure_dirs(self) -> None:
        """Create the debug directory if it doesn't exist."""
        self.debug_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("Ensured directory: %s", self.debug_dir)


def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings()
