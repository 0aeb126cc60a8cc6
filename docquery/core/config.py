"""Client configuration using Pydantic Settings V2."""

from functools import cached_property
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from docquery.core.settings import ApiConfig, AppConfig, StorageConfig


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.api.base_url).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(
        default="docquery",
        description="Application name",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=False,
        description="Debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level",
    )

    # Backend API
    api_url: str = Field(
        default="http://localhost:8000/api/v1",
        description="Base URL of the document-intelligence API",
    )
    api_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Per-request timeout in seconds",
    )

    # Storage
    token_backend: Literal["memory", "file", "redis"] = Field(
        default="file",
        description="Where the access/refresh token pair is persisted",
    )
    token_file: Path = Field(
        default=Path("~/.docquery/tokens.json"),
        description="Token file used by the file backend",
    )
    token_key_prefix: str = Field(
        default="docquery:",
        description="Key prefix used by the redis backend",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    settings_cache_file: Path = Field(
        default=Path("~/.docquery/settings.json"),
        description="Local settings cache used when the settings service is unreachable",
    )

    # --- Domain properties ---

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            env=self.app_env,
            debug=self.debug,
            log_level=self.log_level,
        )

    @cached_property
    def api(self) -> ApiConfig:
        """Backend API configuration."""
        return ApiConfig(
            base_url=self.api_url,
            timeout_seconds=self.api_timeout_seconds,
        )

    @cached_property
    def storage(self) -> StorageConfig:
        """Client-side persistence configuration."""
        return StorageConfig(
            token_backend=self.token_backend,
            token_file=self.token_file.expanduser(),
            token_key_prefix=self.token_key_prefix,
            redis_url=self.redis_url,
            settings_cache_file=self.settings_cache_file.expanduser(),
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
