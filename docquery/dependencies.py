"""Factories wiring settings, credentials, the HTTP client and services."""

from collections.abc import Callable

from docquery.api.client import ApiClient, AuthFailureCallback
from docquery.api.token_store import (
    FileTokenStore,
    MemoryTokenStore,
    RedisTokenStore,
    TokenStore,
)
from docquery.chat.controller import ChatController, ChatView
from docquery.chat.scheduler import AsyncioScheduler, Scheduler
from docquery.chat.scroll import ScrollTracker
from docquery.core.config import Settings, settings
from docquery.core.redis import get_redis
from docquery.schemas.health_schema import ServiceHealth
from docquery.services.analytics_service import AnalyticsService
from docquery.services.auth_service import AuthService
from docquery.services.chat_service import ChatService
from docquery.services.collection_service import CollectionService
from docquery.services.document_service import DocumentService
from docquery.services.health_service import HealthService, ServiceWakeUp
from docquery.services.otp_service import OtpService
from docquery.services.settings_service import SettingsService


def get_token_store(config: Settings = settings) -> TokenStore:
    """Build the token store selected by `token_backend`.

    The redis backend expects `init_redis()` to have been awaited.
    """
    storage = config.storage
    match storage.token_backend:
        case "memory":
            return MemoryTokenStore()
        case "file":
            return FileTokenStore(storage.token_file)
        case "redis":
            return RedisTokenStore(get_redis(), prefix=storage.token_key_prefix)
        case _:
            raise ValueError(f"Unsupported token backend: {storage.token_backend}")


def get_api_client(
    token_store: TokenStore,
    on_auth_failure: AuthFailureCallback | None = None,
    config: Settings = settings,
) -> ApiClient:
    """Create the authenticated client for the configured backend."""
    return ApiClient(
        config.api.normalized_base_url,
        token_store,
        on_auth_failure=on_auth_failure,
        timeout=config.api.timeout_seconds,
    )


class Services:
    """Every endpoint wrapper sharing one `ApiClient`."""

    def __init__(self, client: ApiClient, config: Settings = settings) -> None:
        self.client = client
        self.auth = AuthService(client)
        self.chat = ChatService(client)
        self.documents = DocumentService(client)
        self.collections = CollectionService(client)
        self.settings = SettingsService(client, config.storage.settings_cache_file)
        self.otp = OtpService(client)
        self.analytics = AnalyticsService(client)
        self.health = HealthService(client)


def get_chat_controller(
    chat_service: ChatService,
    view: ChatView | None = None,
    scroll: ScrollTracker | None = None,
    scheduler: Scheduler | None = None,
) -> ChatController:
    """Controller driven by the running event loop unless a scheduler is given."""
    return ChatController(
        chat_service,
        scheduler=scheduler or AsyncioScheduler(),
        view=view,
        scroll=scroll,
    )


def get_service_wake_up(
    health: HealthService,
    on_change: Callable[[ServiceHealth], None] | None = None,
    scheduler: Scheduler | None = None,
) -> ServiceWakeUp:
    return ServiceWakeUp(health, scheduler or AsyncioScheduler(), on_change=on_change)
