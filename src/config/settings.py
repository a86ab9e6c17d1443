# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for query defaults, store selection and logging.
Environment variables are prefixed with KGTRAVERSE_.
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
        env_prefix="KGTRAVERSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Query defaults ===
    full_graph_limit: int = 1000
    traverse_max_depth: int = 2
    traverse_limit: int = 100
    path_max_depth: int = 5
    relation_fetch_limit: int | None = None
    parallel_layer_fetch: bool = True
    query_timeout_seconds: float | None = None

    # === Stores ===
    store_backend: Literal["memory", "networkx"] = "memory"
    snapshot_path: Path | None = None

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("full_graph_limit", "traverse_limit")
    @classmethod
    def validate_positive_limit(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("limits must be > 0")
        return v

    @field_validator("traverse_max_depth", "path_max_depth")
    @classmethod
    def validate_depth(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("depths must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.relation_fetch_limit is not None and self.relation_fetch_limit <= 0:
            errors.append("RELATION_FETCH_LIMIT must be > 0 when set")

        if self.query_timeout_seconds is not None and self.query_timeout_seconds <= 0:
            errors.append("QUERY_TIMEOUT_SECONDS must be > 0 when set")

        if self.snapshot_path is not None and self.snapshot_path.suffix != ".json":
            errors.append("SNAPSHOT_PATH must point to a .json file")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
