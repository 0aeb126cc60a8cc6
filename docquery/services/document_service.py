"""Document ingestion endpoints with client-side input validation."""

import asyncio
import re
from pathlib import Path
from urllib.parse import urlparse

import structlog

from docquery.api.client import ApiClient
from docquery.core.exceptions import (
    RECOVERABLE_ERRORS,
    InputValidationError,
    get_error_message,
)
from docquery.schemas.document_schema import (
    DocumentListResponse,
    DocumentResponse,
    DocumentSummary,
    ImportRequest,
    TextImportRequest,
    UploadResult,
)

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS = (".pdf", ".txt", ".md", ".doc", ".docx")
MAX_UPLOAD_BYTES = 50 * 1024 * 1024
MIN_TEXT_LENGTH = 50
MAX_BULK_FILES = 10

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

YOUTUBE_PATTERNS = (
    re.compile(r"youtube\.com/watch\?v=[a-zA-Z0-9_-]{11}"),
    re.compile(r"youtu\.be/[a-zA-Z0-9_-]{11}"),
    re.compile(r"youtube\.com/embed/[a-zA-Z0-9_-]{11}"),
    re.compile(r"^[a-zA-Z0-9_-]{11}$"),
)


# --- Validation ---


def is_http_url(url: str) -> bool:
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_document_url(url: str) -> str:
    """Accept only http(s) links that point directly at a supported file."""
    url = url.strip()
    if not url:
        raise InputValidationError("Please enter a URL", field="url")
    if not is_http_url(url) or not urlparse(url).path.lower().endswith(
        SUPPORTED_EXTENSIONS
    ):
        raise InputValidationError(
            "Invalid URL. Must be a direct link to a PDF, TXT, MD, DOC, or DOCX file.",
            field="url",
        )
    return url


def validate_website_url(url: str) -> str:
    url = url.strip()
    if not url:
        raise InputValidationError("Please enter a URL", field="url")
    if not is_http_url(url):
        raise InputValidationError(
            "Invalid URL. Please enter a valid http/https URL.", field="url"
        )
    return url


def validate_youtube_url(url: str) -> str:
    url = url.strip()
    if not url:
        raise InputValidationError("Please enter a YouTube URL", field="url")
    if not any(pattern.search(url) for pattern in YOUTUBE_PATTERNS):
        raise InputValidationError(
            "Invalid YouTube URL. Please enter a valid video link.", field="url"
        )
    return url


def validate_text_content(content: str) -> str:
    content = content.strip()
    if not content:
        raise InputValidationError("Please enter some text content", field="content")
    if len(content) < MIN_TEXT_LENGTH:
        raise InputValidationError(
            f"Content too short. Please enter at least {MIN_TEXT_LENGTH} characters.",
            field="content",
        )
    return content


def validate_upload(path: Path) -> None:
    """Reject unsupported file types and oversize files before uploading."""
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise InputValidationError(
            f"Unsupported file type: {path.suffix or path.name}", field="file"
        )
    if path.stat().st_size > MAX_UPLOAD_BYTES:
        raise InputValidationError(
            f"{path.name} exceeds the {MAX_UPLOAD_BYTES // (1024 * 1024)} MB limit",
            field="file",
        )


class DocumentService:
    """Client for the document ingestion service."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_documents(
        self, page: int = 1, page_size: int = 10
    ) -> DocumentListResponse:
        response = await self._client.get(
            "/documents", params={"page": page, "page_size": page_size}
        )
        return DocumentListResponse.model_validate(response.json())

    async def list_ready_documents(self, page_size: int = 100) -> list[DocumentResponse]:
        """Documents whose ingestion completed, i.e. usable for chat scoping."""
        page = await self.list_documents(page=1, page_size=page_size)
        return [doc for doc in page.documents if doc.is_ready]

    async def get_document(self, document_id: int) -> DocumentResponse:
        response = await self._client.get(f"/documents/{document_id}")
        return DocumentResponse.model_validate(response.json())

    async def upload(self, path: Path) -> DocumentResponse:
        """Upload a local file as a multipart payload."""
        validate_upload(path)
        content_type = CONTENT_TYPES[path.suffix.lower()]
        response = await self._client.post(
            "/documents",
            files={"file": (path.name, path.read_bytes(), content_type)},
        )
        return DocumentResponse.model_validate(response.json())

    async def upload_bulk(self, paths: list[Path]) -> list[UploadResult]:
        """Upload several files concurrently; one failure does not stop the rest.

        Results come back in the order of `paths`.
        """
        if not paths:
            raise InputValidationError("No files selected", field="files")
        if len(paths) > MAX_BULK_FILES:
            raise InputValidationError(
                f"At most {MAX_BULK_FILES} files can be uploaded at once", field="files"
            )
        return list(await asyncio.gather(*(self._upload_one(path) for path in paths)))

    async def _upload_one(self, path: Path) -> UploadResult:
        try:
            validate_upload(path)
            content_type = CONTENT_TYPES[path.suffix.lower()]
            response = await self._client.post(
                "/documents/upload",
                files={"file": (path.name, path.read_bytes(), content_type)},
            )
            document = DocumentResponse.model_validate(response.json())
        except (*RECOVERABLE_ERRORS, OSError) as exc:
            message = get_error_message(exc)
            logger.warning("Bulk upload item failed", filename=path.name, error=message)
            return UploadResult(filename=path.name, error=message)
        return UploadResult(filename=path.name, document=document)

    async def delete(self, document_id: int) -> None:
        await self._client.delete(f"/documents/{document_id}")

    async def reprocess(self, document_id: int) -> None:
        await self._client.post(f"/documents/{document_id}/reprocess")

    async def from_url(self, url: str, title: str | None = None) -> DocumentResponse:
        request = ImportRequest(url=validate_document_url(url), title=_title(title))
        response = await self._client.post(
            "/documents/from-url", json=request.model_dump(exclude_none=True)
        )
        return DocumentResponse.model_validate(response.json())

    async def from_text(self, content: str, title: str | None = None) -> DocumentResponse:
        request = TextImportRequest(
            content=validate_text_content(content), title=_title(title)
        )
        response = await self._client.post(
            "/documents/from-text", json=request.model_dump(exclude_none=True)
        )
        return DocumentResponse.model_validate(response.json())

    async def from_youtube(self, url: str, title: str | None = None) -> DocumentResponse:
        request = ImportRequest(url=validate_youtube_url(url), title=_title(title))
        response = await self._client.post(
            "/documents/from-youtube", json=request.model_dump(exclude_none=True)
        )
        return DocumentResponse.model_validate(response.json())

    async def from_website(self, url: str, title: str | None = None) -> DocumentResponse:
        request = ImportRequest(url=validate_website_url(url), title=_title(title))
        response = await self._client.post(
            "/documents/from-website", json=request.model_dump(exclude_none=True)
        )
        return DocumentResponse.model_validate(response.json())

    async def summary(self, document_id: int) -> DocumentSummary:
        response = await self._client.get(f"/documents/{document_id}/summary")
        return DocumentSummary.model_validate(response.json())

    async def regenerate_summary(self, document_id: int) -> None:
        await self._client.post(f"/documents/{document_id}/summary/regenerate")

    async def download(self, document_id: int) -> bytes:
        """Raw document bytes, for viewing or saving locally."""
        response = await self._client.get(f"/documents/{document_id}/download")
        return response.content


def _title(title: str | None) -> str | None:
    if title is None:
        return None
    return title.strip() or None
