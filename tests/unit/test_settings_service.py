"""Tests for SettingsService cache handling."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from docquery.api.client import ApiClient
from docquery.schemas.settings_schema import (
    AppSettings,
    SettingsDefaults,
    SettingsWithModels,
    UserSettings,
)
from docquery.services.settings_service import SettingsService, merge_server_settings


def _remote(provider: str = "openai", model: str = "gpt-4o-mini") -> SettingsWithModels:
    return SettingsWithModels(
        settings=UserSettings(
            id=1,
            user_id=1,
            llm_provider=provider,
            llm_model=model,
            temperature=0.2,
            max_tokens=2048,
        )
    )


@pytest.fixture
def cache_file(tmp_path: Path) -> Path:
    return tmp_path / "settings.json"


@pytest.fixture
def client() -> MagicMock:
    return MagicMock(spec=ApiClient)


class TestMergeServerSettings:
    """Overlaying server values on the local cache."""

    def test_user_settings_win(self) -> None:
        merged = merge_server_settings(AppSettings(), _remote())
        assert merged.llm.provider == "openai"
        assert merged.llm.model == "gpt-4o-mini"
        assert merged.llm.temperature == 0.2
        assert merged.llm.max_tokens == 2048

    def test_defaults_when_no_user_settings(self) -> None:
        remote = SettingsWithModels(
            defaults=SettingsDefaults(
                llm_provider="anthropic",
                llm_model="claude-haiku",
                temperature=0.5,
                max_tokens=1024,
            )
        )
        assert merge_server_settings(AppSettings(), remote).llm.provider == "anthropic"

    def test_nothing_to_merge(self) -> None:
        local = AppSettings()
        assert merge_server_settings(local, SettingsWithModels()) is local

    def test_other_sections_untouched(self) -> None:
        local = AppSettings.model_validate({"search": {"number_of_results": 9}})
        assert merge_server_settings(local, _remote()).search.number_of_results == 9


class TestSettingsService:
    """Local cache and server fallback."""

    def test_defaults_without_cache(self, client: MagicMock, cache_file: Path) -> None:
        service = SettingsService(client, cache_file)
        assert service.current == AppSettings()

    def test_invalid_cache_uses_defaults(self, client: MagicMock, cache_file: Path) -> None:
        cache_file.write_text('{"llm": {"temperature": "hot"}}', encoding="utf-8")
        assert SettingsService(client, cache_file).current == AppSettings()

    def test_local_update_persists(self, client: MagicMock, cache_file: Path) -> None:
        SettingsService(client, cache_file).update_search(number_of_results=3)
        assert SettingsService(client, cache_file).current.search.number_of_results == 3

    def test_local_update_validates(self, client: MagicMock, cache_file: Path) -> None:
        service = SettingsService(client, cache_file)
        with pytest.raises(ValueError):
            service.update_ui(theme="sepia")

    def test_reset(self, client: MagicMock, cache_file: Path) -> None:
        service = SettingsService(client, cache_file)
        service.update_llm(temperature=1.5)
        assert service.reset() == AppSettings()

    async def test_load_merges_and_caches(self, client: MagicMock, cache_file: Path) -> None:
        service = SettingsService(client, cache_file)
        service.get_settings = AsyncMock(return_value=_remote(model="gpt-4o"))  # type: ignore[method-assign]
        loaded = await service.load()
        assert loaded.llm.model == "gpt-4o"
        assert SettingsService(client, cache_file).current.llm.model == "gpt-4o"

    async def test_load_falls_back_to_cache(self, client: MagicMock, cache_file: Path) -> None:
        service = SettingsService(client, cache_file)
        service.update_llm(model="cached-model")
        service.get_settings = AsyncMock(side_effect=httpx.ConnectError("down"))  # type: ignore[method-assign]
        loaded = await service.load()
        assert loaded.llm.model == "cached-model"

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"settings": {"id": 1, "temperature": "hot"}}),
            httpx.Response(200, text="<html>gateway timeout</html>"),
        ],
        ids=["invalid-fields", "not-json"],
    )
    async def test_load_ignores_malformed_payload(
        self, client: MagicMock, cache_file: Path, response: httpx.Response
    ) -> None:
        service = SettingsService(client, cache_file)
        service.update_llm(model="cached-model")
        client.get.return_value = response
        loaded = await service.load()
        assert loaded.llm.model == "cached-model"
        assert SettingsService(client, cache_file).current.llm.model == "cached-model"

    def test_unwritable_cache_is_logged_not_raised(self, client: MagicMock, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        service = SettingsService(client, blocker / "settings.json")
        service.update_ui(theme="light")
        assert service.current.ui.theme == "light"
