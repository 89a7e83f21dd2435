"""
Configuration Management for Naira Power

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable (storage medium, demo account, invite code shape, AI model)
is read and validated in one place.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )

    @field_validator('api_key')
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Reject blank keys so a missing credential fails here, not mid-request."""
        if not v.strip():
            raise ValueError("GEMINI_API_KEY is empty")
        return v.strip()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="NAIRA_POWER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Storage medium
    storage_backend: Literal["memory", "json"] = Field(
        default="json",
        description="Key-value medium holding the record set"
    )
    storage_path: Path = Field(
        default=Path.home() / ".naira_power" / "store.json",
        description="File used by the json storage backend"
    )

    # Accounts
    demo_email: str = Field(
        default="demo@gmail.com",
        description="Email address that is provisioned with the demo household"
    )

    # Invite codes
    invite_code_length: int = Field(
        default=6,
        ge=4,
        le=12,
        description="Length of generated invite codes"
    )
    invite_code_attempts: int = Field(
        default=5,
        ge=1,
        le=20,
        description="How many fresh codes to try when a generated code is taken"
    )

    # Insights
    insight_log_window: int = Field(
        default=10,
        ge=1,
        le=100,
        description="How many recent logs are sent for AI analysis"
    )

    # Audit
    audit_max_events: int = Field(
        default=500,
        ge=1,
        le=100_000,
        description="How many audit events are kept in the store"
    )

    @field_validator('demo_email')
    @classmethod
    def normalize_demo_email(cls, v: str) -> str:
        return v.strip().lower()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.gemini
        results["gemini"] = True
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
