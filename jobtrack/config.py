"""
Configuration via environment variables (JOBTRACK_*) and an optional .env file.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Tracker settings loaded from environment variables."""

    # Storage
    db_path: str = "jobtrack.db"
    key_prefix: str = "jobtrack_"
    seed_demo_data: bool = False  # Seed sample applications/companies on first run

    # Query engine
    debounce_ms: int = Field(default=300, ge=0)

    # Virtual window
    virtualization_threshold: int = Field(default=50, ge=0)
    overscan: int = Field(default=5, ge=0)
    row_height: int = Field(default=56, gt=0)  # px at "comfortable" density

    # Status feed
    status_ttl_s: float = Field(default=3.0, gt=0)

    # Logging
    log_level: str = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept any case; fall back to WARNING for unknown names."""
        level = str(v or "").strip().upper()
        return level if level in _LOG_LEVELS else "WARNING"

    @property
    def debounce_s(self) -> float:
        return self.debounce_ms / 1000

    class Config:
        env_prefix = "JOBTRACK_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
