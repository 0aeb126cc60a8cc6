"""User settings: remote settings service plus a local fallback cache."""

import json
from pathlib import Path
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from docquery.api.client import ApiClient
from docquery.schemas.settings_schema import (
    ApiKeyProvider,
    AppSettings,
    ProvidersResponse,
    SettingsUpdateRequest,
    SettingsWithModels,
    UserSettings,
)

logger = structlog.get_logger()


def merge_server_settings(local: AppSettings, remote: SettingsWithModels) -> AppSettings:
    """Overlay the server's LLM settings (or its defaults) on the local cache."""
    source = remote.settings or remote.defaults
    if source is None:
        return local
    llm = local.llm.model_copy(
        update={
            "provider": source.llm_provider,
            "model": source.llm_model,
            "temperature": source.temperature,
            "max_tokens": source.max_tokens,
        }
    )
    return local.model_copy(update={"llm": llm})


class SettingsService:
    """Reads and writes settings, tolerating an unreachable settings service.

    `current` always holds the last known settings. It starts from the local
    cache file and is refreshed from the server by `load()`.
    """

    def __init__(self, client: ApiClient, cache_file: Path) -> None:
        self._client = client
        self._cache_file = cache_file
        self.current = self._read_cache()

    # --- Remote ---

    async def get_settings(self) -> SettingsWithModels:
        response = await self._client.get("/settings")
        return SettingsWithModels.model_validate(response.json())

    async def update_settings(self, request: SettingsUpdateRequest) -> UserSettings:
        response = await self._client.put(
            "/settings", json=request.model_dump(exclude_none=True)
        )
        return UserSettings.model_validate(response.json())

    async def delete_api_key(self, provider: ApiKeyProvider) -> None:
        await self._client.delete(f"/settings/api-key/{provider}")

    async def get_providers(self) -> ProvidersResponse:
        response = await self._client.get("/settings/providers")
        return ProvidersResponse.model_validate(response.json())

    async def load(self) -> AppSettings:
        """Merge server values into the cache; keep the cache if the server fails."""
        try:
            remote = await self.get_settings()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Settings service unavailable, using cache", error=str(exc))
            return self.current
        self.current = merge_server_settings(self.current, remote)
        self._write_cache()
        return self.current

    # --- Local cache ---

    def update_llm(self, **changes: Any) -> AppSettings:
        return self._update_section("llm", changes)

    def update_document(self, **changes: Any) -> AppSettings:
        return self._update_section("document", changes)

    def update_search(self, **changes: Any) -> AppSettings:
        return self._update_section("search", changes)

    def update_ui(self, **changes: Any) -> AppSettings:
        return self._update_section("ui", changes)

    def reset(self) -> AppSettings:
        self.current = AppSettings()
        self._write_cache()
        return self.current

    def _update_section(self, name: str, changes: dict[str, Any]) -> AppSettings:
        section: BaseModel = getattr(self.current, name)
        updated = type(section).model_validate({**section.model_dump(), **changes})
        self.current = self.current.model_copy(update={name: updated})
        self._write_cache()
        return self.current

    def _read_cache(self) -> AppSettings:
        try:
            raw = json.loads(self._cache_file.read_text(encoding="utf-8"))
            return AppSettings.model_validate(raw)
        except FileNotFoundError:
            return AppSettings()
        except (OSError, ValueError, ValidationError):
            logger.warning("Invalid settings cache, using defaults", path=str(self._cache_file))
            return AppSettings()

    def _write_cache(self) -> None:
        try:
            self._cache_file.parent.mkdir(parents=True, exist_ok=True)
            self._cache_file.write_text(self.current.model_dump_json(indent=2), encoding="utf-8")
        except OSError:
            logger.exception("Failed to write settings cache", path=str(self._cache_file))
