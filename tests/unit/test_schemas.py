"""Tests for request/response schemas."""

import pytest
from pydantic import ValidationError

from docquery.schemas.auth_schema import LoginRequest, RegisterRequest, TokenPair
from docquery.schemas.chat_schema import LocalMessage, SendMessageRequest, Source
from docquery.schemas.document_schema import DocumentSummary
from tests.factories import NOW, make_message


class TestAuthSchemas:
    """Validation of auth payloads."""

    def test_register_passwords_must_match(self) -> None:
        with pytest.raises(ValidationError, match="Passwords do not match"):
            RegisterRequest(
                email="a@example.com",
                username="alice",
                password="Secret123!",
                confirm_password="Secret123?",
            )

    def test_register_normalizes_email(self) -> None:
        request = RegisterRequest(
            email="Alice@Example.com",
            username="alice",
            password="Secret123!",
            confirm_password="Secret123!",
        )
        assert request.email == "alice@example.com"

    def test_login_rejects_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            LoginRequest(email="not-an-email", password="x")

    def test_token_pair_default_type(self) -> None:
        pair = TokenPair(access_token="a", refresh_token="r")
        assert pair.token_type == "bearer"


class TestChatSchemas:
    """Chat message projections."""

    def test_send_message_requires_text(self) -> None:
        with pytest.raises(ValidationError):
            SendMessageRequest(message="")

    def test_history_message_is_fully_displayed(self) -> None:
        local = LocalMessage.from_server(make_message(5, "stored answer"))
        assert local.id == "5"
        assert local.displayed_content == "stored answer"
        assert local.is_streaming is False
        assert local.sources == []

    def test_streaming_message_starts_empty(self) -> None:
        local = LocalMessage.from_server(make_message(6, "new answer"), streaming=True)
        assert local.displayed_content == ""
        assert local.is_streaming is True

    def test_sources_are_copied(self) -> None:
        source = Source(
            document_id=7,
            document_name="policy.pdf",
            chunk_id=1,
            content="...",
            relevance_score=0.8,
        )
        message = make_message(7, "answer").model_copy(update={"sources": [source]})
        assert LocalMessage.from_server(message).sources == [source]

    def test_local_message_is_mutable_copy(self) -> None:
        local = LocalMessage(id="local-1", role="user", content="hi", created_at=NOW)
        updated = local.model_copy(update={"feedback": "thumbs_up"})
        assert local.feedback is None
        assert updated.feedback == "thumbs_up"


class TestDocumentSchemas:
    """Document payloads."""

    def test_summary_keeps_unknown_fields(self) -> None:
        summary = DocumentSummary.model_validate(
            {"document_id": 1, "summary": "s", "topics": ["refunds"]}
        )
        assert summary.model_extra == {"topics": ["refunds"]}
