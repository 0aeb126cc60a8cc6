"""Collection request/response schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SharePermission = Literal["view", "edit", "admin"]


class CollectionResponse(BaseModel):
    """Folder-like grouping of documents."""

    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    name: str
    description: str | None = None
    color: str
    icon: str
    is_public: bool = False
    document_count: int = 0
    created_at: datetime
    updated_at: datetime


class CollectionWithDocuments(CollectionResponse):
    """Collection including its document ids."""

    document_ids: list[int] = Field(default_factory=list)


class CollectionList(BaseModel):
    """All collections visible to the user."""

    model_config = ConfigDict(frozen=True)

    collections: list[CollectionResponse]
    total: int


class CreateCollectionRequest(BaseModel):
    """Request to create a collection."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    document_ids: list[int] | None = None


class UpdateCollectionRequest(BaseModel):
    """Partial update of a collection."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    is_public: bool | None = None


class CollectionShare(BaseModel):
    """Grant of access to a collection for another user."""

    model_config = ConfigDict(frozen=True)

    id: int
    collection_id: int
    shared_with_user_id: int
    shared_with_email: str
    shared_with_username: str
    permission: SharePermission
    created_at: datetime
