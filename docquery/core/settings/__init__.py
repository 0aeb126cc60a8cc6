"""Domain-specific configuration models."""

from docquery.core.settings.api_config import ApiConfig
from docquery.core.settings.app_config import AppConfig
from docquery.core.settings.storage_config import StorageConfig

__all__ = [
    "ApiConfig",
    "AppConfig",
    "StorageConfig",
]
