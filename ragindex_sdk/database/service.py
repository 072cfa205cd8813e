# ragindex_sdk/database/service.py
# SPDX-License-Identifier: Apache-2.0
"""
DatabaseService: thin facade over one vector adapter.

Owns the adapter for a session (created through an AdapterFactory), adds
convenience writes that stamp ids and timestamps, and computes collection
statistics using whichever strategy the backend supports.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ragindex_sdk.vector.config import DEFAULT_LIST_LIMIT, DEFAULT_SEARCH_K
from ragindex_sdk.vector.factory import AdapterFactory
from ragindex_sdk.vector.filters import bucket_label
from ragindex_sdk.vector.vector_base import (
    CAP_GROUPED_COUNT,
    AdapterInfo,
    NotInitialized,
    ValidationError,
    VectorDBAdapter,
    VectorDocument,
    VectorSearchResult,
)

LOG = logging.getLogger(__name__)

SOURCE_TYPE_KEY = "sourceType"
UNKNOWN_SOURCE_TYPE = "unknown"


@dataclass
class DatabaseStats:
    """
    Aggregate view of the store.

    Attributes:
        total_items: Number of stored documents
        by_source_type: Document count per `metadata["sourceType"]`; only
            categories with at least one document appear
    """
    total_items: int = 0
    by_source_type: Dict[str, int] = field(default_factory=dict)

    def asdict(self) -> Dict[str, Any]:
        return {"totalItems": self.total_items, "bySourceType": dict(self.by_source_type)}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _new_document(
    content: str,
    embedding: Sequence[float],
    metadata: Optional[Mapping[str, Any]] = None,
) -> VectorDocument:
    return VectorDocument(
        id=str(uuid.uuid4()),
        embedding=list(embedding),
        content=content,
        metadata={**(metadata or {}), "createdAt": _timestamp()},
    )


class DatabaseService:
    """
    Facade used by indexing and query code.

    Example:
        service = DatabaseService()
        await service.initialize({"provider": "sqlite", "options": {"path": "idx.db"}})
        try:
            await service.save_item("hello", embedding, {"sourceType": "text"})
            stats = await service.get_stats()
        finally:
            await service.close()
    """

    def __init__(self, factory: Optional[AdapterFactory] = None) -> None:
        self._factory = factory or AdapterFactory()
        self._adapter: Optional[VectorDBAdapter] = None

    @property
    def adapter(self) -> VectorDBAdapter:
        if self._adapter is None:
            raise NotInitialized("Database service not initialized")
        return self._adapter

    @property
    def is_initialized(self) -> bool:
        return self._adapter is not None

    async def initialize(self, config: Any = None) -> None:
        if self._adapter is not None:
            LOG.debug("Database service already initialized")
            return
        self._adapter = await self._factory.create(config)
        LOG.debug("Database service initialized with %s", self._adapter.get_info().provider)

    async def close(self) -> None:
        adapter, self._adapter = self._adapter, None
        if adapter is not None:
            await adapter.close()

    async def __aenter__(self) -> "DatabaseService":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------ writes --------------------------------- #

    async def save_item(
        self,
        content: str,
        embedding: Sequence[float],
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Store one item with a fresh id and a `createdAt` timestamp."""
        adapter = self.adapter
        return await adapter.insert(_new_document(content, embedding, metadata))

    async def save_items(self, items: Sequence[Mapping[str, Any]]) -> List[str]:
        """
        Store many items (`{"content", "embedding", "metadata"?}` mappings)
        through the adapter's batch insert.
        """
        adapter = self.adapter
        documents: List[VectorDocument] = []
        for i, item in enumerate(items):
            if not isinstance(item, Mapping) or "embedding" not in item:
                raise ValidationError(
                    "each item must be a mapping with 'content' and 'embedding'",
                    details={"index": i},
                )
            documents.append(
                _new_document(item.get("content", ""), item["embedding"], item.get("metadata"))
            )
        return await adapter.insert_batch(documents)

    # ------------------------------ reads ---------------------------------- #

    async def search_items(
        self,
        embedding: Sequence[float],
        *,
        k: int = DEFAULT_SEARCH_K,
        source_type: Optional[str] = None,
    ) -> List[VectorSearchResult]:
        flt = {SOURCE_TYPE_KEY: source_type} if source_type else None
        return await self.adapter.search(embedding, k=k, filter=flt)

    async def count_items(self, filter: Optional[Mapping[str, Any]] = None) -> int:
        return await self.adapter.count(filter)

    async def list_items(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> List[VectorDocument]:
        return await self.adapter.list(limit=limit, offset=offset, filter=filter)

    async def get_stats(self) -> DatabaseStats:
        """
        Total count plus a per-`sourceType` breakdown.

        Backends advertising grouped counts compute the breakdown natively;
        others are scanned page by page.
        """
        adapter = self.adapter
        total = await adapter.count()
        if adapter.get_info().supports(CAP_GROUPED_COUNT):
            grouped = await adapter.count_by(SOURCE_TYPE_KEY, missing=UNKNOWN_SOURCE_TYPE)
        else:
            grouped = await self._scan_source_types(adapter)
        return DatabaseStats(
            total_items=total,
            by_source_type={k: v for k, v in grouped.items() if v > 0},
        )

    @staticmethod
    async def _scan_source_types(adapter: VectorDBAdapter) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        offset = 0
        while True:
            page = await adapter.list(limit=DEFAULT_LIST_LIMIT, offset=offset)
            for doc in page:
                value = doc.metadata.get(SOURCE_TYPE_KEY)
                bucket = bucket_label(value, UNKNOWN_SOURCE_TYPE)
                counts[bucket] = counts.get(bucket, 0) + 1
            if len(page) < DEFAULT_LIST_LIMIT:
                return counts
            offset += len(page)

    def get_adapter_info(self) -> Optional[AdapterInfo]:
        return self._adapter.get_info() if self._adapter is not None else None


__all__ = [
    "DatabaseService",
    "DatabaseStats",
    "SOURCE_TYPE_KEY",
    "UNKNOWN_SOURCE_TYPE",
]
