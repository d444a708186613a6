"""
Live document access.

`DocumentClient` is the narrow interface the publishing code needs from a
Google Doc: read it, apply a batch of requests, create a new one.
`GoogleDocsClient` implements it on top of a googleapiclient Docs v1 service.
"""

import asyncio
import logging
from typing import Any, Protocol

from core.utils import handle_http_errors

logger = logging.getLogger(__name__)


class DocumentClient(Protocol):
    async def query(self, document_id: str) -> dict[str, Any]:
        """Return the current `documents.get` structure."""
        ...

    async def mutate(self, document_id: str, requests: list[dict[str, Any]]) -> dict[str, Any]:
        """Apply requests as one `batchUpdate`."""
        ...

    async def create(self, title: str) -> dict[str, Any]:
        """Create an empty document and return its metadata."""
        ...


class GoogleDocsClient:
    """
    DocumentClient over a Docs API service object.

    Example:
        >>> service = build("docs", "v1", credentials=credentials)
        >>> client = GoogleDocsClient(service)
    """

    def __init__(self, service: Any):
        self.service = service

    @handle_http_errors("documents.get", is_read_only=True)
    async def query(self, document_id: str) -> dict[str, Any]:
        logger.debug(f"[documents.get] Doc={document_id}")
        return await asyncio.to_thread(self.service.documents().get(documentId=document_id).execute)

    @handle_http_errors("documents.batchUpdate")
    async def mutate(self, document_id: str, requests: list[dict[str, Any]]) -> dict[str, Any]:
        logger.debug(f"[documents.batchUpdate] Doc={document_id}, {len(requests)} request(s)")
        return await asyncio.to_thread(
            self.service.documents().batchUpdate(documentId=document_id, body={"requests": requests}).execute
        )

    @handle_http_errors("documents.create")
    async def create(self, title: str) -> dict[str, Any]:
        logger.debug(f"[documents.create] Title={title!r}")
        return await asyncio.to_thread(self.service.documents().create(body={"title": title}).execute)
