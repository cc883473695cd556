"""Application configuration model using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Configuration loaded from RESUMABLE_BATCH_* environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RESUMABLE_BATCH_",
        case_sensitive=False,
        extra="ignore",
    )

    state_file_path: str = "data/batch-state.json"
    log_level: str = "INFO"
    batch_size: int = 20
    concurrency_limit: int = 10
    state_update_interval: int = 5
    save_state_on_batch: bool = True
    save_state_on_item: bool = False
    save_state_interval: int = 5

    @field_validator("state_file_path")
    @classmethod
    def validate_state_file_path(cls, value: str) -> str:
        """Ensure parent directory exists, creating it if necessary."""
        if not value.strip():
            msg = "state_file_path must not be empty"
            raise ValueError(msg)
        Path(value).parent.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @field_validator(
        "batch_size",
        "concurrency_limit",
        "state_update_interval",
        "save_state_interval",
    )
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Sizes and intervals must be positive."""
        if value <= 0:
            msg = "batch sizes, limits and intervals must be greater than 0"
            raise ValueError(msg)
        return value
