"""Collection (folder/project) endpoints."""

from typing import Literal

from docquery.api.client import ApiClient
from docquery.schemas.collection_schema import (
    CollectionList,
    CollectionResponse,
    CollectionShare,
    CollectionWithDocuments,
    CreateCollectionRequest,
    SharePermission,
    UpdateCollectionRequest,
)


class CollectionService:
    """Client for collection management and sharing."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def create(self, request: CreateCollectionRequest) -> CollectionResponse:
        response = await self._client.post(
            "/collections", json=request.model_dump(exclude_none=True)
        )
        return CollectionResponse.model_validate(response.json())

    async def list_collections(self, include_shared: bool = True) -> CollectionList:
        response = await self._client.get(
            "/collections", params={"include_shared": include_shared}
        )
        return CollectionList.model_validate(response.json())

    async def get(self, collection_id: int) -> CollectionWithDocuments:
        response = await self._client.get(f"/collections/{collection_id}")
        return CollectionWithDocuments.model_validate(response.json())

    async def update(
        self, collection_id: int, request: UpdateCollectionRequest
    ) -> CollectionResponse:
        response = await self._client.patch(
            f"/collections/{collection_id}",
            json=request.model_dump(exclude_none=True),
        )
        return CollectionResponse.model_validate(response.json())

    async def delete(self, collection_id: int) -> None:
        await self._client.delete(f"/collections/{collection_id}")

    async def update_documents(
        self,
        collection_id: int,
        document_ids: list[int],
        action: Literal["add", "remove"],
    ) -> None:
        """Add documents to, or remove them from, a collection."""
        await self._client.post(
            f"/collections/{collection_id}/documents",
            json={"document_ids": document_ids, "action": action},
        )

    async def document_ids(self, collection_id: int) -> list[int]:
        response = await self._client.get(f"/collections/{collection_id}/documents")
        return [int(doc_id) for doc_id in response.json()]

    async def share(
        self,
        collection_id: int,
        user_email: str,
        permission: SharePermission = "view",
    ) -> CollectionShare:
        response = await self._client.post(
            f"/collections/{collection_id}/shares",
            json={"user_email": user_email, "permission": permission},
        )
        return CollectionShare.model_validate(response.json())

    async def shares(self, collection_id: int) -> list[CollectionShare]:
        response = await self._client.get(f"/collections/{collection_id}/shares")
        return [CollectionShare.model_validate(item) for item in response.json()]

    async def update_share(
        self, share_id: int, permission: SharePermission
    ) -> CollectionShare:
        response = await self._client.patch(
            f"/collections/shares/{share_id}", json={"permission": permission}
        )
        return CollectionShare.model_validate(response.json())

    async def remove_share(self, share_id: int) -> None:
        await self._client.delete(f"/collections/shares/{share_id}")
