"""Client-side persistence configuration."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel


class StorageConfig(BaseModel, frozen=True):
    """Token and settings-cache storage settings."""

    token_backend: Literal["memory", "file", "redis"]
    token_file: Path
    token_key_prefix: str
    redis_url: str
    settings_cache_file: Path
