"""Runtime settings with environment variable support."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kiln.config.models import CacheStrategy


class KilnSettings(BaseSettings):
    """Settings resolved from ``KILN_*`` environment variables.

    CLI flags override these values; defaults apply when neither is given.
    """

    model_config = SettingsConfigDict(
        env_prefix="KILN_",
        case_sensitive=False,
        extra="ignore",
    )

    config_file: Path | None = None
    log_level: str = "WARNING"
    jobs: int = Field(default=1, ge=1)
    cache_strategy: CacheStrategy = CacheStrategy.ISOLATED
    git_executable: str = "git"
    cargo_executable: str = "cargo"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is recognized."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper_v = v.strip().upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return upper_v
