"""Application environment configuration."""

import logging
from typing import Literal

from pydantic import BaseModel


class AppConfig(BaseModel, frozen=True):
    """Application environment settings."""

    name: str
    env: Literal["development", "staging", "production"]
    debug: bool
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env == "production"

    @property
    def log_level_number(self) -> int:
        """Numeric level for structlog's filtering logger."""
        if self.debug:
            return logging.DEBUG
        return logging.getLevelName(self.log_level)
