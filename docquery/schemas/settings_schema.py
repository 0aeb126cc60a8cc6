"""User settings schemas, remote and locally cached."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ApiKeyProvider = Literal["openai", "anthropic", "gemini"]


# --- Remote (settings service) ---


class LLMProvider(BaseModel):
    """LLM provider offered by the backend."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    description: str = ""
    requires_key: bool = False


class LLMModel(BaseModel):
    """Model offered by a provider."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class UserSettings(BaseModel):
    """Server-side per-user LLM settings."""

    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    llm_provider: str
    llm_model: str
    temperature: float
    max_tokens: int
    has_openai_key: bool = False
    has_anthropic_key: bool = False
    has_gemini_key: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SettingsDefaults(BaseModel):
    """Backend defaults used when the user has no stored settings."""

    model_config = ConfigDict(frozen=True)

    llm_provider: str
    llm_model: str
    temperature: float
    max_tokens: int


class SettingsWithModels(BaseModel):
    """Settings together with the selectable providers and models."""

    model_config = ConfigDict(frozen=True)

    settings: UserSettings | None = None
    providers: list[LLMProvider] = Field(default_factory=list)
    models: dict[str, list[LLMModel]] = Field(default_factory=dict)
    defaults: SettingsDefaults | None = None


class ProvidersResponse(BaseModel):
    """Public provider/model catalogue."""

    model_config = ConfigDict(frozen=True)

    providers: list[LLMProvider] = Field(default_factory=list)
    models: dict[str, list[LLMModel]] = Field(default_factory=dict)


class SettingsUpdateRequest(BaseModel):
    """Partial update of server-side settings."""

    llm_provider: str | None = None
    llm_model: str | None = None
    temperature: float | None = Field(default=None, ge=0, le=2)
    max_tokens: int | None = Field(default=None, ge=1)
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    gemini_api_key: str | None = None


# --- Local cache ---


class LLMSettings(BaseModel):
    """LLM preferences."""

    provider: str = "groq"
    model: str = "llama-3.3-70b-versatile"
    temperature: float = 0.7
    max_tokens: int = 4096


class DocumentSettings(BaseModel):
    """Chunking preferences."""

    chunk_size: int = 1000
    chunk_overlap: int = 200
    allowed_extensions: list[str] = Field(
        default_factory=lambda: ["pdf", "txt", "doc", "docx", "md"]
    )


class SearchSettings(BaseModel):
    """Retrieval preferences."""

    number_of_results: int = 5
    similarity_threshold: float = 0.7
    search_scope: Literal["all", "collection", "document"] = "all"


class UISettings(BaseModel):
    """Display preferences."""

    theme: Literal["dark", "light"] = "dark"


class AppSettings(BaseModel):
    """Locally cached settings, merged with the server's values when reachable."""

    llm: LLMSettings = Field(default_factory=LLMSettings)
    document: DocumentSettings = Field(default_factory=DocumentSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    ui: UISettings = Field(default_factory=UISettings)
