"""Document request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DocumentStatus = Literal["pending", "processing", "completed", "failed"]


class DocumentResponse(BaseModel):
    """Uploaded document and its ingestion status."""

    model_config = ConfigDict(frozen=True)

    id: int
    filename: str
    original_filename: str
    file_type: str
    file_size: int
    title: str | None = None
    description: str | None = None
    status: DocumentStatus
    error_message: str | None = None
    chunk_count: int = 0
    created_at: datetime
    updated_at: datetime
    processed_at: datetime | None = None

    @property
    def is_ready(self) -> bool:
        """Only completed documents can scope a chat."""
        return self.status == "completed"


class DocumentListResponse(BaseModel):
    """Page of documents."""

    model_config = ConfigDict(frozen=True)

    documents: list[DocumentResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class DocumentSummary(BaseModel):
    """Generated document summary."""

    model_config = ConfigDict(frozen=True, extra="allow")

    document_id: int
    summary: str
    key_points: list[str] = Field(default_factory=list)


class ImportRequest(BaseModel):
    """Import of a remote resource (URL, YouTube video, website)."""

    url: str
    title: str | None = None


class TextImportRequest(BaseModel):
    """Document created from pasted text."""

    content: str
    title: str | None = None


class UploadResult(BaseModel):
    """Outcome of one file in a bulk upload."""

    model_config = ConfigDict(frozen=True)

    filename: str
    document: DocumentResponse | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None
