"""Chat session and message schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system"]
FeedbackVerdict = Literal["thumbs_up", "thumbs_down", "reported"]
ExportFormat = Literal["pdf", "markdown", "json"]


class Source(BaseModel):
    """Document chunk cited by an assistant answer."""

    model_config = ConfigDict(frozen=True)

    document_id: int
    document_name: str
    chunk_id: int
    content: str
    relevance_score: float
    page: int | None = None


class ChatSession(BaseModel):
    """Server-tracked conversation thread."""

    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int | None = None
    title: str | None = None
    description: str | None = None
    document_ids: list[int] = Field(default_factory=list)
    collection_id: int | None = None
    is_active: bool = True
    is_pinned: bool = False
    message_count: int = 0
    created_at: datetime
    updated_at: datetime
    last_message_at: datetime | None = None


class ChatMessage(BaseModel):
    """Single message as stored by the backend."""

    model_config = ConfigDict(frozen=True)

    id: int
    session_id: int
    role: Role
    content: str
    sources: list[Source] | None = None
    feedback: FeedbackVerdict | None = None
    feedback_text: str | None = None
    generation_time_ms: int | None = None
    tokens_used: int | None = None
    model_used: str | None = None
    created_at: datetime


class ChatSessionWithMessages(ChatSession):
    """Session together with its full message history."""

    messages: list[ChatMessage] = Field(default_factory=list)


class ChatSessionList(BaseModel):
    """Page of chat sessions."""

    model_config = ConfigDict(frozen=True)

    sessions: list[ChatSession]
    total: int
    page: int
    per_page: int


class CreateSessionRequest(BaseModel):
    """Request to create a chat session."""

    title: str | None = None
    description: str | None = None
    document_ids: list[int] | None = None
    collection_id: int | None = None


class UpdateSessionRequest(BaseModel):
    """Partial update of a chat session."""

    title: str | None = None
    description: str | None = None
    is_pinned: bool | None = None
    document_ids: list[int] | None = None
    collection_id: int | None = None


class SendMessageRequest(BaseModel):
    """Message sent to a session."""

    message: str = Field(..., min_length=1)
    document_ids: list[int] | None = None
    stream: bool = False


class SendMessageResponse(BaseModel):
    """Assistant answer plus the updated session and follow-up suggestions."""

    model_config = ConfigDict(frozen=True)

    message: ChatMessage
    session: ChatSession
    suggested_questions: list[str] = Field(default_factory=list)


class FeedbackRequest(BaseModel):
    """Feedback verdict for one assistant message."""

    feedback: FeedbackVerdict
    feedback_text: str | None = None


class ExportRequest(BaseModel):
    """Chat export request."""

    format: ExportFormat
    include_sources: bool = True


class ExportResponse(BaseModel):
    """Location of a generated chat export."""

    model_config = ConfigDict(frozen=True)

    download_url: str
    filename: str
    format: str
    expires_at: datetime


class LocalMessage(BaseModel):
    """Client-side projection of a message with ephemeral display state.

    `displayed_content` is the prefix revealed so far by the reveal
    animation. `is_loading` marks the placeholder shown while waiting for the
    backend; `is_streaming` is set while the reveal animation runs.
    """

    id: str
    role: Role
    content: str
    displayed_content: str = ""
    sources: list[Source] = Field(default_factory=list)
    feedback: FeedbackVerdict | None = None
    created_at: datetime
    is_loading: bool = False
    is_streaming: bool = False

    @classmethod
    def from_server(cls, message: ChatMessage, *, streaming: bool = False) -> "LocalMessage":
        """Project a server message; history loads arrive fully displayed."""
        return cls(
            id=str(message.id),
            role=message.role,
            content=message.content,
            displayed_content="" if streaming else message.content,
            sources=list(message.sources or []),
            feedback=message.feedback,
            created_at=message.created_at,
            is_streaming=streaming,
        )
