"""Chat session and message endpoints."""

from docquery.api.client import ApiClient
from docquery.schemas.chat_schema import (
    ChatMessage,
    ChatSession,
    ChatSessionList,
    ChatSessionWithMessages,
    CreateSessionRequest,
    ExportFormat,
    ExportRequest,
    ExportResponse,
    FeedbackRequest,
    FeedbackVerdict,
    SendMessageRequest,
    SendMessageResponse,
    UpdateSessionRequest,
)


class ChatService:
    """Client for the chat/RAG engine's session API."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def create_session(
        self,
        document_ids: list[int] | None = None,
        collection_id: int | None = None,
        title: str | None = None,
        description: str | None = None,
    ) -> ChatSession:
        """Create a session, optionally scoped to documents or a collection."""
        request = CreateSessionRequest(
            title=title,
            description=description,
            document_ids=document_ids or None,
            collection_id=collection_id,
        )
        response = await self._client.post(
            "/chat/sessions", json=request.model_dump(exclude_none=True)
        )
        return ChatSession.model_validate(response.json())

    async def list_sessions(self, page: int = 1, per_page: int = 20) -> ChatSessionList:
        response = await self._client.get(
            "/chat/sessions", params={"page": page, "per_page": per_page}
        )
        return ChatSessionList.model_validate(response.json())

    async def get_session(self, session_id: int) -> ChatSessionWithMessages:
        response = await self._client.get(f"/chat/sessions/{session_id}")
        return ChatSessionWithMessages.model_validate(response.json())

    async def update_session(
        self, session_id: int, request: UpdateSessionRequest
    ) -> ChatSession:
        response = await self._client.patch(
            f"/chat/sessions/{session_id}",
            json=request.model_dump(exclude_none=True),
        )
        return ChatSession.model_validate(response.json())

    async def delete_session(self, session_id: int, permanent: bool = False) -> None:
        """Soft-delete a session, or remove it for good with `permanent=True`."""
        await self._client.delete(
            f"/chat/sessions/{session_id}", params={"permanent": permanent}
        )

    async def send_message(
        self,
        session_id: int,
        message: str,
        document_ids: list[int] | None = None,
    ) -> SendMessageResponse:
        """Send a user message and wait for the complete assistant answer."""
        request = SendMessageRequest(message=message, document_ids=document_ids or None)
        response = await self._client.post(
            f"/chat/sessions/{session_id}/messages",
            json=request.model_dump(exclude_none=True),
        )
        return SendMessageResponse.model_validate(response.json())

    async def get_messages(
        self, session_id: int, limit: int | None = None
    ) -> list[ChatMessage]:
        response = await self._client.get(
            f"/chat/sessions/{session_id}/messages", params={"limit": limit}
        )
        return [ChatMessage.model_validate(item) for item in response.json()]

    async def submit_feedback(
        self,
        message_id: int,
        feedback: FeedbackVerdict,
        feedback_text: str | None = None,
    ) -> ChatMessage:
        request = FeedbackRequest(feedback=feedback, feedback_text=feedback_text)
        response = await self._client.post(
            f"/chat/messages/{message_id}/feedback",
            json=request.model_dump(exclude_none=True),
        )
        return ChatMessage.model_validate(response.json())

    async def export_session(
        self,
        session_id: int,
        format: ExportFormat,
        include_sources: bool = True,
    ) -> ExportResponse:
        request = ExportRequest(format=format, include_sources=include_sources)
        response = await self._client.post(
            f"/chat/sessions/{session_id}/export", json=request.model_dump()
        )
        return ExportResponse.model_validate(response.json())
