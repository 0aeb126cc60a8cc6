"""Backend API connection configuration."""

from pydantic import BaseModel


class ApiConfig(BaseModel, frozen=True):
    """Backend API settings."""

    base_url: str
    timeout_seconds: float

    @property
    def normalized_base_url(self) -> str:
        """Base URL without a trailing slash."""
        return self.base_url.rstrip("/")
