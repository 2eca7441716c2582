# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for dedup timing, quota limits, request log sizing,
pagination defaults and logging. Every field maps to an upper-case env var
(e.g. ``DEDUP_WINDOW_MS``, ``QUOTA_DAILY_READ_LIMIT``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Query deduplication ===
    dedup_enabled: bool = True
    dedup_window_ms: int = 1000
    dedup_sweep_interval_ms: int = 5000

    # === Request log ===
    request_log_capacity: int = 1000

    # === Quota (free-tier baseline) ===
    quota_daily_read_limit: int = 50_000
    quota_daily_write_limit: int = 20_000
    quota_daily_delete_limit: int = 20_000
    quota_window_policy: Literal["manual", "daily"] = "manual"

    # === Pagination ===
    pagination_default_limit: int = 10

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "dedup_window_ms",
        "dedup_sweep_interval_ms",
        "request_log_capacity",
        "quota_daily_read_limit",
        "quota_daily_write_limit",
        "quota_daily_delete_limit",
        "pagination_default_limit",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        # Sweeping faster than the window expires entries would only churn.
        if self.dedup_sweep_interval_ms < self.dedup_window_ms:
            errors.append(
                "DEDUP_SWEEP_INTERVAL_MS must be >= DEDUP_WINDOW_MS"
            )

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def dedup_window_seconds(self) -> float:
        return self.dedup_window_ms / 1000.0

    @property
    def dedup_sweep_interval_seconds(self) -> float:
        return self.dedup_sweep_interval_ms / 1000.0


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-app config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
