# ragindex_sdk/vector/pinecone_adapter.py
# SPDX-License-Identifier: Apache-2.0
"""
Pinecone vector adapter.

Maps the adapter contract onto a single Pinecone index (optionally scoped to
one namespace).

Goals
-----
- Keep the contract async while the Pinecone SDK blocks: every SDK call runs
  via `asyncio.to_thread`.
- Normalize Pinecone errors into the vector error taxonomy.
- Use Pinecone's native bulk upsert/delete, chunked to `max_batch_size`.

Usage
-----
    from ragindex_sdk.vector import VectorDBConfig
    from ragindex_sdk.vector.pinecone_adapter import PineconeVectorAdapter

    adapter = PineconeVectorAdapter(
        VectorDBConfig(
            provider="pinecone",
            options={"index_name": "docs", "dimension": 1536, "namespace": "kb"},
        )
    )
    async with adapter:
        await adapter.insert(VectorDocument(embedding=[...], content="hello"))

Options
-------
    index_name      required; the index must already exist
    api_key         falls back to PINECONE_API_KEY
    namespace       default "" (Pinecone's default namespace)
    metric          cosine | euclidean | dotproduct (default cosine)
    dimension       embedding dimension (default 768)
    max_batch_size  vectors per upsert/delete request (default 100)
    client          pre-built `Pinecone` client (skips api_key handling)

Document content is stored in metadata under the reserved key `_content`.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

import pinecone
from pinecone import Pinecone
from pinecone.exceptions import PineconeException

from ragindex_sdk.vector.filters import matches_filter, to_pinecone_filter
from ragindex_sdk.vector.vector_base import (
    CAP_BATCH_OPERATIONS,
    CAP_CUSTOM_IDS,
    CAP_DELETE_MISSING_NOOP,
    CAP_METADATA_FILTER,
    CAP_PERSISTENT,
    CAP_VECTOR_SEARCH,
    AdapterInfo,
    BackendConnectionError,
    BaseVectorAdapter,
    ConfigurationError,
    StorageError,
    ValidationError,
    VectorDBError,
    VectorDocument,
    VectorSearchResult,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTENT_KEY = "_content"
API_KEY_ENV = "PINECONE_API_KEY"
SUPPORTED_METRICS = ("cosine", "euclidean", "dotproduct")
DEFAULT_MAX_BATCH_SIZE = 100
# Upper bound on ids per fetch request.
FETCH_CHUNK = 100


def _chunks(items: Sequence[T], size: int) -> Iterable[Tuple[int, Sequence[T]]]:
    for start in range(0, len(items), size):
        yield start, items[start:start + size]


class PineconeVectorAdapter(BaseVectorAdapter):
    """
    Adapter backed by an existing Pinecone index.

    Design notes
    ------------
    - Does *not* manage index lifecycle; create/delete indexes outside.
    - Deleting an unknown id is a no-op (Pinecone semantics).
    - Listing pages ids with `index.list`, sorts them, then fetches the
      requested window, so order is by id rather than insertion.
    """

    provider = "pinecone"
    _component = "vector_pinecone"

    def __init__(self, config=None, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        options = self._config.options

        index_name = options.get("index_name")
        if not index_name or not isinstance(index_name, str):
            raise ConfigurationError(
                "pinecone provider requires options.index_name (non-empty string)"
            )

        metric = str(options.get("metric") or "cosine").lower().strip()
        if metric not in SUPPORTED_METRICS:
            raise ConfigurationError(
                f"metric must be one of: {', '.join(SUPPORTED_METRICS)}",
                details={"metric": metric},
            )

        max_batch_size = options.get("max_batch_size", DEFAULT_MAX_BATCH_SIZE)
        if isinstance(max_batch_size, bool) or not isinstance(max_batch_size, int) or max_batch_size <= 0:
            raise ConfigurationError("max_batch_size must be a positive integer")

        self._index_name = index_name
        self._metric = metric
        self._namespace = str(options.get("namespace") or "")
        self._max_batch_size = max_batch_size
        self._api_key: Optional[str] = options.get("api_key")
        self._client: Any = options.get("client")
        self._index: Any = None

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _get_index(self) -> Any:
        """Return the cached index handle, creating it on first use."""
        if self._index is not None:
            return self._index
        if self._client is None:
            api_key = self._api_key or os.getenv(API_KEY_ENV) or ""
            if not api_key:
                raise ConfigurationError(
                    "Pinecone requires an API key "
                    f"(set options.api_key or {API_KEY_ENV})."
                )
            self._client = Pinecone(api_key=api_key)
        try:
            self._index = self._client.Index(self._index_name)
        except Exception as exc:
            raise self._translate_error(exc, op="init_index") from exc
        return self._index

    @staticmethod
    async def _run_in_thread(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run blocking client calls on a worker thread.

        This keeps the adapter async-first while dealing with a blocking SDK.
        """
        return await asyncio.to_thread(func, *args, **kwargs)

    @staticmethod
    def _safe_get(obj: Any, key: str, default: Any = None) -> Any:
        """Support both dict-style and attribute-style access."""
        if isinstance(obj, Mapping):
            return obj.get(key, default)
        return getattr(obj, key, default)

    async def _call_pinecone(self, *, op: str, func: Callable[..., T], **kwargs: Any) -> T:
        """Execute a Pinecone SDK call with error translation."""
        try:
            return await self._run_in_thread(func, **kwargs)
        except VectorDBError:
            raise
        except Exception as exc:
            raise self._translate_error(exc, op=op) from exc

    def _convert_score(self, raw_score: float) -> Tuple[float, float]:
        """
        Convert Pinecone's `score` into (similarity, distance).

        - cosine: score is similarity → distance = 1 - score
        - euclidean: score is distance → similarity = 1 / (1 + distance)
        - dotproduct: score is similarity → distance = -score
        """
        s = float(raw_score)
        if self._metric == "euclidean":
            distance = max(0.0, s)
            return 1.0 / (1.0 + distance), distance
        if self._metric == "dotproduct":
            return s, -s
        return s, 1.0 - s

    def _translate_error(self, err: Exception, *, op: str) -> VectorDBError:
        """Map Pinecone and transport exceptions into normalized error types."""
        msg = str(err) or f"Pinecone error during {op}"
        logger.debug("Pinecone error in %s: %r", op, err)
        details = {"op": op, "provider": self.provider}

        status = (
            getattr(err, "status", None)
            or getattr(err, "status_code", None)
            or getattr(getattr(err, "response", None), "status_code", None)
        )
        try:
            status_int: Optional[int] = int(status) if status is not None else None
        except (TypeError, ValueError):
            status_int = None
        lowered = msg.lower()

        if status_int in (401, 403) or "unauthorized" in lowered or "forbidden" in lowered:
            return ConfigurationError(
                "Pinecone authentication/authorization error", details=details
            )

        if status_int in (400, 422) or (
            isinstance(err, PineconeException)
            and ("invalid" in lowered or "bad request" in lowered)
        ):
            return ValidationError(msg, details=details)

        if (
            isinstance(err, (TimeoutError, ConnectionError))
            or "timeout" in lowered
            or "timed out" in lowered
            or "connection" in lowered
        ):
            return BackendConnectionError(f"Pinecone connection error: {msg}", details=details)

        if status_int is not None:
            details["status"] = status_int
        return StorageError(msg, details=details)

    def _to_record(self, document: VectorDocument) -> Dict[str, Any]:
        if CONTENT_KEY in document.metadata:
            raise ValidationError(
                f"metadata key '{CONTENT_KEY}' is reserved by the pinecone adapter",
                details={"id": document.id},
            )
        metadata = dict(document.metadata)
        metadata[CONTENT_KEY] = document.content
        return {
            "id": document.id,
            "values": [float(x) for x in document.embedding],
            "metadata": metadata,
        }

    def _to_document(self, vid: str, values: Any, meta: Any) -> VectorDocument:
        metadata = dict(meta) if isinstance(meta, Mapping) else {}
        content = metadata.pop(CONTENT_KEY, "")
        return VectorDocument(
            id=vid,
            embedding=[float(x) for x in (values or [])],
            content=str(content) if content is not None else "",
            metadata=metadata,
        )

    async def _fetch(self, ids: Sequence[str]) -> Dict[str, VectorDocument]:
        index = self._get_index()
        found: Dict[str, VectorDocument] = {}
        for _, chunk in _chunks(list(ids), FETCH_CHUNK):
            resp = await self._call_pinecone(
                op="fetch",
                func=index.fetch,
                ids=list(chunk),
                namespace=self._namespace,
            )
            vectors = self._safe_get(resp, "vectors", None) or {}
            for vid, vec in vectors.items():
                found[str(vid)] = self._to_document(
                    str(vid),
                    self._safe_get(vec, "values", []),
                    self._safe_get(vec, "metadata", None),
                )
        return found

    async def _all_ids(self) -> List[str]:
        index = self._get_index()

        def _collect() -> List[str]:
            out: List[str] = []
            for page in index.list(namespace=self._namespace):
                out.extend(str(i) for i in page)
            return out

        ids = await self._call_pinecone(op="list", func=_collect)
        return sorted(set(ids))

    async def _scan(self, flt: Optional[Dict[str, Any]]) -> List[VectorDocument]:
        ids = await self._all_ids()
        docs = await self._fetch(ids)
        return [docs[i] for i in ids if i in docs and matches_filter(docs[i].metadata, flt)]

    # ------------------------------------------------------------------ #
    # BaseVectorAdapter backend hooks
    # ------------------------------------------------------------------ #

    async def _do_initialize(self) -> None:
        index = self._get_index()
        stats = await self._call_pinecone(op="initialize", func=index.describe_index_stats)
        reported = self._safe_get(stats, "dimension", None)
        if reported and int(reported) != self._dimension:
            raise ConfigurationError(
                f"Pinecone index '{self._index_name}' has dimension {reported}, "
                f"adapter configured for {self._dimension}",
                details={"expected": self._dimension, "actual": int(reported)},
            )
        logger.debug("Connected to Pinecone index %s (namespace=%r)", self._index_name, self._namespace)

    async def _do_close(self) -> None:
        self._index = None

    def _do_info(self) -> AdapterInfo:
        return AdapterInfo(
            provider=self.provider,
            version=getattr(pinecone, "__version__", "unknown"),
            capabilities=(
                CAP_VECTOR_SEARCH,
                CAP_METADATA_FILTER,
                CAP_CUSTOM_IDS,
                CAP_BATCH_OPERATIONS,
                CAP_PERSISTENT,
                CAP_DELETE_MISSING_NOOP,
            ),
            metric=self._metric,
        )

    # ------------------------------ query ---------------------------------- #

    async def _do_search(
        self,
        embedding: List[float],
        k: int,
        flt: Optional[Dict[str, Any]],
    ) -> List[VectorSearchResult]:
        index = self._get_index()
        kwargs: Dict[str, Any] = {
            "vector": embedding,
            "top_k": k,
            "namespace": self._namespace,
            "include_values": True,
            "include_metadata": True,
        }
        pinecone_filter = to_pinecone_filter(flt)
        if pinecone_filter:
            kwargs["filter"] = pinecone_filter

        resp = await self._call_pinecone(op="query", func=index.query, **kwargs)

        results: List[VectorSearchResult] = []
        for m in self._safe_get(resp, "matches", None) or []:
            vid = str(self._safe_get(m, "id", "") or "")
            if not vid:
                continue
            sim, dist = self._convert_score(self._safe_get(m, "score", 0.0) or 0.0)
            document = self._to_document(
                vid,
                self._safe_get(m, "values", []),
                self._safe_get(m, "metadata", None),
            )
            results.append(VectorSearchResult(document=document, score=sim, distance=dist))
        return results

    # ------------------------------ upsert --------------------------------- #

    async def _do_insert(self, document: VectorDocument) -> str:
        index = self._get_index()
        await self._call_pinecone(
            op="upsert",
            func=index.upsert,
            vectors=[self._to_record(document)],
            namespace=self._namespace,
        )
        return document.id

    async def _do_update(self, document: VectorDocument) -> None:
        await self._do_insert(document)

    async def _do_insert_batch(self, documents: List[VectorDocument]) -> List[str]:
        """
        Validate every document, then upsert in chunks of `max_batch_size`.

        A failing chunk stops the batch; earlier chunks stay written.
        """
        records: List[Dict[str, Any]] = []
        for i, document in enumerate(documents):
            try:
                records.append(self._to_record(self._prepare_document(document)))
            except VectorDBError as err:
                self._annotate_batch_error(
                    err, index=i, item_id=getattr(document, "id", None), completed=[]
                )
                raise

        index = self._get_index()
        ids = [r["id"] for r in records]
        for start, chunk in _chunks(records, self._max_batch_size):
            try:
                await self._call_pinecone(
                    op="upsert",
                    func=index.upsert,
                    vectors=list(chunk),
                    namespace=self._namespace,
                )
            except VectorDBError as err:
                self._annotate_batch_error(
                    err, index=start, item_id=ids[start], completed=ids[:start]
                )
                raise
            logger.debug("Upserted %d/%d vectors", start + len(chunk), len(records))
        return ids

    # ------------------------------ delete --------------------------------- #

    async def _do_delete(self, doc_id: str) -> None:
        index = self._get_index()
        await self._call_pinecone(
            op="delete",
            func=index.delete,
            ids=[doc_id],
            namespace=self._namespace,
        )

    async def _do_delete_batch(self, ids: List[str]) -> None:
        for i, doc_id in enumerate(ids):
            try:
                self._require_id(doc_id)
            except VectorDBError as err:
                self._annotate_batch_error(err, index=i, item_id=doc_id, completed=[])
                raise

        index = self._get_index()
        for start, chunk in _chunks(ids, self._max_batch_size):
            try:
                await self._call_pinecone(
                    op="delete",
                    func=index.delete,
                    ids=list(chunk),
                    namespace=self._namespace,
                )
            except VectorDBError as err:
                self._annotate_batch_error(
                    err, index=start, item_id=ids[start], completed=ids[:start]
                )
                raise

    # ------------------------------ reads ---------------------------------- #

    async def _do_get(self, doc_id: str) -> Optional[VectorDocument]:
        docs = await self._fetch([doc_id])
        return docs.get(doc_id)

    async def _do_count(self, flt: Optional[Dict[str, Any]]) -> int:
        if flt:
            return len(await self._scan(flt))
        index = self._get_index()
        stats = await self._call_pinecone(op="count", func=index.describe_index_stats)
        namespaces = self._safe_get(stats, "namespaces", None) or {}
        info = namespaces.get(self._namespace) if isinstance(namespaces, Mapping) else None
        if info is None:
            return 0
        return int(self._safe_get(info, "vector_count", 0) or 0)

    async def _do_list(
        self,
        limit: int,
        offset: int,
        flt: Optional[Dict[str, Any]],
    ) -> List[VectorDocument]:
        if flt:
            return (await self._scan(flt))[offset:offset + limit]
        window = (await self._all_ids())[offset:offset + limit]
        docs = await self._fetch(window)
        return [docs[i] for i in window if i in docs]


__all__ = [
    "PineconeVectorAdapter",
    "CONTENT_KEY",
]
