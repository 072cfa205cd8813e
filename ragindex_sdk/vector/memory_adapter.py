# ragindex_sdk/vector/memory_adapter.py
# SPDX-License-Identifier: Apache-2.0
"""
In-memory vector adapter.

Keeps documents in a dict in insertion order and scores them with cosine
similarity. Intended for tests, demos and small ephemeral indexes; nothing
survives `close()`.
"""

from __future__ import annotations

import copy
import math
from typing import Any, Dict, List, Optional

from ragindex_sdk.vector.filters import matches_filter
from ragindex_sdk.vector.vector_base import (
    CAP_CUSTOM_IDS,
    CAP_DELETE_MISSING_NOOP,
    CAP_IN_MEMORY,
    CAP_METADATA_FILTER,
    CAP_VECTOR_SEARCH,
    AdapterInfo,
    BaseVectorAdapter,
    VectorDocument,
    VectorSearchResult,
)

ADAPTER_VERSION = "1.0.0"

# ------------------------------- utilities --------------------------------- #


def _cosine_sim(a: List[float], b: List[float]) -> float:
    num = sum(x * y for x, y in zip(a, b))
    den_a = math.sqrt(sum(x * x for x in a))
    den_b = math.sqrt(sum(y * y for y in b))
    if den_a == 0.0 or den_b == 0.0:
        return 0.0
    return num / (den_a * den_b)


def _copy(doc: VectorDocument) -> VectorDocument:
    # Callers must not be able to mutate stored state through returned objects.
    return VectorDocument(
        id=doc.id,
        embedding=list(doc.embedding),
        content=doc.content,
        metadata=copy.deepcopy(doc.metadata),
    )

# ----------------------------- adapter class ------------------------------- #


class MemoryVectorAdapter(BaseVectorAdapter):
    """
    Dict-backed adapter.

    Re-inserting an existing id replaces the document in place (its list
    position is kept). Deleting an unknown id is a no-op.
    """

    provider = "memory"

    def __init__(self, config=None, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self._docs: Dict[str, VectorDocument] = {}

    async def _do_initialize(self) -> None:
        self._docs = {}

    async def _do_close(self) -> None:
        self._docs.clear()

    def _do_info(self) -> AdapterInfo:
        return AdapterInfo(
            provider=self.provider,
            version=ADAPTER_VERSION,
            capabilities=(
                CAP_VECTOR_SEARCH,
                CAP_METADATA_FILTER,
                CAP_CUSTOM_IDS,
                CAP_IN_MEMORY,
                CAP_DELETE_MISSING_NOOP,
            ),
            metric="cosine",
        )

    # ------------------------------ writes --------------------------------- #

    async def _do_insert(self, document: VectorDocument) -> str:
        self._docs[document.id] = _copy(document)
        return document.id

    async def _do_update(self, document: VectorDocument) -> None:
        self._docs[document.id] = _copy(document)

    async def _do_delete(self, doc_id: str) -> None:
        self._docs.pop(doc_id, None)

    # ------------------------------ reads ---------------------------------- #

    async def _do_get(self, doc_id: str) -> Optional[VectorDocument]:
        doc = self._docs.get(doc_id)
        return _copy(doc) if doc is not None else None

    async def _do_search(
        self,
        embedding: List[float],
        k: int,
        flt: Optional[Dict[str, Any]],
    ) -> List[VectorSearchResult]:
        scored: List[VectorSearchResult] = []
        for doc in self._docs.values():
            if not matches_filter(doc.metadata, flt):
                continue
            sim = _cosine_sim(embedding, doc.embedding)
            scored.append(
                VectorSearchResult(document=_copy(doc), score=sim, distance=1.0 - sim)
            )
        scored.sort(key=lambda r: r.score, reverse=True)
        return scored[:k]

    async def _do_count(self, flt: Optional[Dict[str, Any]]) -> int:
        if not flt:
            return len(self._docs)
        return sum(1 for d in self._docs.values() if matches_filter(d.metadata, flt))

    async def _do_list(
        self,
        limit: int,
        offset: int,
        flt: Optional[Dict[str, Any]],
    ) -> List[VectorDocument]:
        docs = [d for d in self._docs.values() if matches_filter(d.metadata, flt)]
        return [_copy(d) for d in docs[offset:offset + limit]]


__all__ = ["MemoryVectorAdapter"]
