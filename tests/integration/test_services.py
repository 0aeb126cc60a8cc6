"""Integration tests for endpoint services against the fake backend."""

from pathlib import Path

import httpx
import pytest

from docquery.api.client import ApiClient
from docquery.api.token_store import MemoryTokenStore
from docquery.core.exceptions import InputValidationError, NotAuthenticatedError
from docquery.schemas.auth_schema import LoginRequest, RegisterRequest
from docquery.schemas.chat_schema import UpdateSessionRequest
from docquery.services.analytics_service import AnalyticsService
from docquery.services.auth_service import AuthService
from docquery.services.chat_service import ChatService
from docquery.services.collection_service import CollectionService
from docquery.services.document_service import MAX_BULK_FILES, DocumentService
from docquery.services.health_service import HealthService
from docquery.services.otp_service import OtpService
from docquery.services.settings_service import SettingsService
from tests.fakes import PASSWORD, FakeBackend


class TestAuthService:
    """Login, registration, logout and profile lookup."""

    @pytest.fixture
    def auth(self, api_client: ApiClient) -> AuthService:
        return AuthService(api_client)

    async def test_login_stores_tokens(
        self, auth: AuthService, token_store: MemoryTokenStore
    ) -> None:
        await token_store.clear()
        user = await auth.login(LoginRequest(email="Test@Test.com", password=PASSWORD))
        assert user.username == "tester"
        assert auth.user == user
        assert await token_store.get_access_token() == "access-login"

    async def test_login_with_wrong_password(
        self, auth: AuthService, token_store: MemoryTokenStore
    ) -> None:
        await token_store.clear()
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await auth.login(LoginRequest(email="test@test.com", password="wrong"))
        assert exc_info.value.response.status_code == 401
        assert await auth.is_authenticated() is False

    async def test_register_then_login(self, auth: AuthService, token_store: MemoryTokenStore) -> None:
        await token_store.clear()
        user = await auth.register(
            RegisterRequest(
                email="test@test.com",
                username="tester",
                password=PASSWORD,
                confirm_password=PASSWORD,
            )
        )
        assert user.email == "test@test.com"
        assert await auth.is_authenticated() is True

    async def test_logout_is_local(
        self, auth: AuthService, backend: FakeBackend, token_store: MemoryTokenStore
    ) -> None:
        await auth.current_user()
        calls = len(backend.requests)
        await auth.logout()
        assert await token_store.get_access_token() is None
        assert auth.user is None
        assert len(backend.requests) == calls

    async def test_current_user_requires_tokens(
        self, auth: AuthService, token_store: MemoryTokenStore
    ) -> None:
        await token_store.clear()
        with pytest.raises(NotAuthenticatedError):
            await auth.current_user()

    async def test_current_user_failure_drops_tokens(
        self, auth: AuthService, backend: FakeBackend, token_store: MemoryTokenStore
    ) -> None:
        backend.expire_access_tokens()
        backend.fail_refresh = True
        with pytest.raises(httpx.HTTPStatusError):
            await auth.current_user()
        assert await token_store.get_access_token() is None

    async def test_stats(self, auth: AuthService) -> None:
        stats = await auth.stats()
        assert stats.document_count == 3


class TestChatService:
    """Session and message endpoints."""

    async def test_session_lifecycle(self, chat_service: ChatService, backend: FakeBackend) -> None:
        session = await chat_service.create_session(document_ids=[7])
        assert session.document_ids == [7]

        response = await chat_service.send_message(session.id, "What is the refund policy?")
        assert response.message.role == "assistant"
        assert response.message.sources and response.message.sources[0].page == 2
        assert response.session.message_count == 2

        history = await chat_service.get_session(session.id)
        assert [m.role for m in history.messages] == ["user", "assistant"]

        listing = await chat_service.list_sessions()
        assert listing.total == 1

    async def test_suggested_questions(self, chat_service: ChatService, backend: FakeBackend) -> None:
        backend.suggested_questions = ["What about shipping?"]
        session = await chat_service.create_session()
        response = await chat_service.send_message(session.id, "Hi")
        assert response.suggested_questions == ["What about shipping?"]

    async def test_update_and_delete(self, chat_service: ChatService, backend: FakeBackend) -> None:
        session = await chat_service.create_session()
        updated = await chat_service.update_session(
            session.id, UpdateSessionRequest(title="Refunds", is_pinned=True)
        )
        assert updated.title == "Refunds"
        assert updated.is_pinned is True

        await chat_service.delete_session(session.id)
        assert backend.sessions[session.id]["is_active"] is False
        await chat_service.delete_session(session.id, permanent=True)
        assert session.id not in backend.sessions

    async def test_feedback(self, chat_service: ChatService, backend: FakeBackend) -> None:
        session = await chat_service.create_session()
        response = await chat_service.send_message(session.id, "Hi")
        rated = await chat_service.submit_feedback(response.message.id, "thumbs_down", "too vague")
        assert rated.feedback == "thumbs_down"

    async def test_missing_session(self, chat_service: ChatService) -> None:
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await chat_service.get_session(404404)
        assert exc_info.value.response.status_code == 404


class TestDocumentService:
    """Document listing, upload and import."""

    @pytest.fixture
    def documents(self, api_client: ApiClient) -> DocumentService:
        return DocumentService(api_client)

    async def test_ready_documents_only(self, documents: DocumentService) -> None:
        ready = await documents.list_ready_documents()
        assert [d.id for d in ready] == [7]

    async def test_upload_sends_multipart(
        self, documents: DocumentService, backend: FakeBackend, tmp_path: Path
    ) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("meeting notes", encoding="utf-8")
        document = await documents.upload(path)
        assert document.status == "pending"
        assert b'filename="notes.txt"' in backend.uploads[0]
        assert b"meeting notes" in backend.uploads[0]

    async def test_bulk_upload_reports_each_file(
        self, documents: DocumentService, backend: FakeBackend, tmp_path: Path
    ) -> None:
        good = tmp_path / "notes.txt"
        good.write_text("meeting notes", encoding="utf-8")
        broken = tmp_path / "scan.pdf"
        broken.write_bytes(b"corrupt")
        skipped = tmp_path / "photo.png"
        skipped.write_bytes(b"png")

        results = await documents.upload_bulk([good, broken, skipped])

        assert [r.filename for r in results] == ["notes.txt", "scan.pdf", "photo.png"]
        assert [r.ok for r in results] == [True, False, False]
        assert results[0].document is not None
        assert results[0].document.original_filename == "notes.txt"
        assert results[1].error == "Could not parse scan.pdf"
        assert results[2].error == "Unsupported file type: .png"
        assert sorted(backend.bulk_uploads) == ["notes.txt", "scan.pdf"]

    async def test_bulk_upload_limit(
        self, documents: DocumentService, backend: FakeBackend, tmp_path: Path
    ) -> None:
        paths = [tmp_path / f"{i}.txt" for i in range(MAX_BULK_FILES + 1)]
        with pytest.raises(InputValidationError):
            await documents.upload_bulk(paths)
        with pytest.raises(InputValidationError):
            await documents.upload_bulk([])
        assert backend.bulk_uploads == []

    async def test_invalid_url_is_not_sent(
        self, documents: DocumentService, backend: FakeBackend
    ) -> None:
        with pytest.raises(InputValidationError):
            await documents.from_url("https://example.com/page")
        assert backend.requests == []

    async def test_from_url(self, documents: DocumentService) -> None:
        document = await documents.from_url("https://example.com/files/handbook.pdf", title="  ")
        assert document.original_filename == "handbook.pdf"

    async def test_download(self, documents: DocumentService) -> None:
        assert (await documents.download(7)).startswith(b"%PDF")


class TestOtherServices:
    """Collections, OTP and settings."""

    async def test_collections(self, api_client: ApiClient) -> None:
        collections = CollectionService(api_client)
        listing = await collections.list_collections()
        assert listing.total == 0
        await collections.update_documents(3, [7, 8], "add")

    async def test_otp_request(self, api_client: ApiClient) -> None:
        response = await OtpService(api_client).request_otp("test@test.com", "password_reset")
        assert response.success is True

    async def test_settings_load(self, api_client: ApiClient, tmp_path: Path) -> None:
        service = SettingsService(api_client, tmp_path / "settings.json")
        loaded = await service.load()
        assert loaded.llm.provider == "openai"
        assert (tmp_path / "settings.json").exists()

    async def test_settings_fallback_on_server_error(
        self, api_client: ApiClient, backend: FakeBackend, tmp_path: Path
    ) -> None:
        backend.settings_status = 503
        service = SettingsService(api_client, tmp_path / "settings.json")
        loaded = await service.load()
        assert loaded.llm.provider == "groq"


class TestAnalyticsService:
    """Usage stats and timeline."""

    @pytest.fixture
    def analytics(self, api_client: ApiClient) -> AnalyticsService:
        return AnalyticsService(api_client)

    async def test_overview(self, analytics: AnalyticsService) -> None:
        overview = await analytics.overview(7)
        assert overview.stats.period_days == 7
        assert overview.stats.queries.total == 14
        assert [entry.queries for entry in overview.timeline] == [4, 9, 1]
        assert overview.peak_day is not None
        assert str(overview.peak_day.date) == "2026-01-02"

    async def test_unsupported_period_is_not_sent(
        self, analytics: AnalyticsService, backend: FakeBackend
    ) -> None:
        with pytest.raises(InputValidationError):
            await analytics.stats(14)
        assert backend.requests == []


class TestHealthService:
    """Detailed health endpoint."""

    async def test_detailed(self, api_client: ApiClient, backend: FakeBackend) -> None:
        backend.milvus_status = "unhealthy"
        health = await HealthService(api_client).detailed()
        assert health.backend_healthy
        assert not health.milvus_healthy

    async def test_starting_backend_raises_status_error(
        self, api_client: ApiClient, backend: FakeBackend
    ) -> None:
        backend.health_status = "starting"
        with pytest.raises(httpx.HTTPStatusError):
            await HealthService(api_client).detailed()
