"""Application settings loaded from the environment."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AutoDeploySettings(BaseSettings):
    """Runtime configuration.

    Every field can be overridden with an ``AUTODEPLOY_``-prefixed environment
    variable or a ``.env`` file entry.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTODEPLOY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    db_path: Path = Field(default=Path(".autodeploy/autodeploy.db"))

    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    github_api_base: str = "https://api.github.com"
    vercel_api_base: str = "https://api.vercel.com"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_api_key: str = Field(default="", description="Google Gemini API key")
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = Field(default=0.2, ge=0.0, le=2.0)

    request_timeout_seconds: float = Field(default=30.0, gt=0)

    history_gist_filename: str = "autodeploy-data.json"
    history_gist_description: str = "autodeploy-sync"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v
