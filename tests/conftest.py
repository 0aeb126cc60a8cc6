"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from unittest.mock import MagicMock

import fakeredis.aioredis
import pytest
from httpx import ASGITransport

from docquery.api.client import ApiClient
from docquery.api.token_store import MemoryTokenStore
from docquery.chat.controller import ChatController
from docquery.schemas.auth_schema import TokenPair
from docquery.services.chat_service import ChatService
from tests.factories import make_send_response, make_session
from tests.fakes import BASE_URL, FakeBackend, ManualScheduler, RecordingView

# --- Test Redis (fakeredis) ---


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Create a fresh fake Redis client."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


# --- Fake backend & client fixtures ---


@pytest.fixture
def backend() -> FakeBackend:
    """In-process API that accepts `access-1` / `refresh-1`."""
    return FakeBackend()


@pytest.fixture
def token_store() -> MemoryTokenStore:
    return MemoryTokenStore(
        TokenPair(access_token="access-1", refresh_token="refresh-1")
    )


@pytest.fixture
def auth_failure() -> MagicMock:
    """Records auth-failure notifications."""
    return MagicMock(return_value=None)


@pytest.fixture
async def api_client(
    backend: FakeBackend,
    token_store: MemoryTokenStore,
    auth_failure: MagicMock,
) -> AsyncGenerator[ApiClient, None]:
    """ApiClient talking to the fake backend through an ASGI transport."""
    transport = ASGITransport(app=backend.app)
    async with ApiClient(
        BASE_URL,
        token_store,
        on_auth_failure=auth_failure,
        transport=transport,
    ) as client:
        yield client


@pytest.fixture
def chat_service(api_client: ApiClient) -> ChatService:
    return ChatService(api_client)


# --- Controller fixtures ---


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def mock_chat_service() -> MagicMock:
    """ChatService double; async methods become AsyncMocks via the spec."""
    mock = MagicMock(spec=ChatService)
    mock.create_session.return_value = make_session()
    mock.send_message.return_value = make_send_response("Hello there, how can I help?")
    return mock


@pytest.fixture
def controller(
    mock_chat_service: MagicMock,
    scheduler: ManualScheduler,
    view: RecordingView,
) -> ChatController:
    return ChatController(mock_chat_service, scheduler=scheduler, view=view)
