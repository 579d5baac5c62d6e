# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: inference
backend, default agent models, engine behaviour and logging.
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

    # === INFERENCE ===
    inference_provider: str = "ollama"
    ollama_host: str = "http://localhost:11434"
    inference_timeout_s: float = 300.0

    # === DEFAULT AGENT ===
    default_models: str = "llama3.2,llama2,codellama"
    default_model: str = "llama3.2"
    default_max_concurrent_tasks: int = 3

    # === ENGINE ===
    register_builtin_capabilities: bool = True
    delegation_default_task_type: str = "custom"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("default_max_concurrent_tasks")
    @classmethod
    def validate_max_concurrent(cls, v: int) -> int:  # noqa: N805
        if v < 1:
            raise ValueError("default_max_concurrent_tasks must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.inference_timeout_s <= 0:
            errors.append("INFERENCE_TIMEOUT_S must be positive")

        models = self.default_models_list
        if self.default_model and models and self.default_model not in models:
            errors.append(
                f"DEFAULT_MODEL {self.default_model!r} is not in DEFAULT_MODELS"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def default_models_list(self) -> list[str]:
        """Parse comma-separated default models."""
        return [m.strip() for m in self.default_models.split(",") if m.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
