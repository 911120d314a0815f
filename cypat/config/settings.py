"""Engine settings loaded from environment variables and an optional .env file."""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Tuning and failure-mode settings for a scoring engine.

    Every field can be overridden with a ``CYPAT_``-prefixed environment
    variable, e.g. ``CYPAT_POLL_INTERVAL=0.5``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CYPAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Scheduler cadence
    poll_interval: float = Field(default=0.2, gt=0)  # seconds between ticks
    completed_review_interval: int = Field(default=10, ge=1)  # ticks

    # Failure modes
    ignore_lock_failures: bool = False
    stop_wait_timeout: float | None = Field(default=None, gt=0)

    # Side services
    command_timeout: float = Field(default=10.0, gt=0)

    # Applied by Engine(configure_logs=True)
    log_level: str = "INFO"

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> EngineSettings:
    return EngineSettings()


settings = get_settings()
