# ragindex_sdk/vector/vector_base.py
# SPDX-License-Identifier: Apache-2.0
"""
RAG Index SDK - Vector storage adapter contract

Purpose
-------
A stable, backend-neutral API for storing documents as embeddings plus
metadata and serving similarity search, listing and counting over them.
Every caller above this layer (indexer, query command, tool handlers) talks
to the same contract regardless of which vector engine sits underneath.

This file provides:

- Typed Python contracts for the shared data model
  (VectorDocument, VectorSearchResult, AdapterInfo)
- The VectorDBAdapter protocol every backend satisfies
- BaseVectorAdapter, which owns lifecycle checks, validation, metrics and
  the default sequential batch behaviour, so concrete backends implement
  only single-item `_do_*` hooks

Design Philosophy
-----------------
- Minimal surface area: CRUD, similarity search, list/count, lifecycle
- Async-first: every data operation is awaitable
- Identical semantics across backends: ordering, id assignment, filtering
  and partial-failure behaviour are enforced here, not per backend
- Capability negotiation: `get_info().capabilities` tells callers which
  optional behaviours a backend offers, so they adapt instead of probing

Deliberate Non-Goals
--------------------
- No embedding generation or chunking
- No retry, timeout or cancellation policy (callers wrap if desired)
- No result re-ranking beyond enforcing best-match-first order

Batch Semantics
---------------
`insert_batch` / `delete_batch` default to one item at a time in input
order. There is no atomicity: when item *i* fails, items before it remain
applied, later items are not attempted, and the first error is raised with
`details["batch_index"]`, `details["batch_id"]` and
`details["completed_ids"]`. Backends with native bulk primitives override
`_do_insert_batch` / `_do_delete_batch` and may offer stronger guarantees,
never weaker ordering.
"""

from __future__ import annotations

import logging
import math
import numbers
import time
import uuid
from dataclasses import asdict, dataclass, field, replace
from typing import (
    Any,
    Awaitable,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    runtime_checkable,
)

from ragindex_sdk.vector.config import (
    DEFAULT_LIST_LIMIT,
    DEFAULT_LIST_OFFSET,
    DEFAULT_SEARCH_K,
    VectorDBConfig,
    resolve_dimension,
)
from ragindex_sdk.vector.errors import (
    BackendConnectionError,
    ClosedError,
    ConfigurationError,
    DimensionMismatch,
    NotFoundError,
    NotInitialized,
    NotSupported,
    StorageError,
    ValidationError,
    VectorDBError,
)

LOG = logging.getLogger(__name__)

T = TypeVar("T")

# =============================================================================
# Capabilities (advertised through get_info)
# =============================================================================

CAP_VECTOR_SEARCH = "vector-search"
CAP_METADATA_FILTER = "metadata-filter"
CAP_CUSTOM_IDS = "custom-ids"
CAP_BATCH_OPERATIONS = "batch-operations"
CAP_ATOMIC_BATCH = "atomic-batch"
CAP_GROUPED_COUNT = "grouped-count"
CAP_PERSISTENT = "persistent"
CAP_IN_MEMORY = "in-memory"
CAP_DELETE_MISSING_NOOP = "delete-missing-noop"
CAP_DELETE_MISSING_ERROR = "delete-missing-error"

# =============================================================================
# Core Type Definitions
# =============================================================================

@dataclass(frozen=True)
class VectorDocument:
    """
    A stored document: embedding, original content and open metadata.

    Attributes:
        id: Unique identifier; assigned by the adapter on insert when None
        embedding: Dense vector; length must equal the adapter dimension
        content: Original text associated with the vector
        metadata: Caller-defined key/value pairs. Well-known keys include
            title, url, sourceType, sourceId, chunkIndex, createdAt
    """
    id: Optional[str] = None
    embedding: List[float] = field(default_factory=list)
    content: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class VectorSearchResult:
    """
    A single similarity match.

    Attributes:
        document: The matching document
        score: Similarity score (higher = more similar)
        distance: Raw distance in the backend metric (lower = closer)
        rank: 0-based position in the result ordering
    """
    document: VectorDocument
    score: float
    distance: float = 0.0
    rank: int = 0

    @property
    def id(self) -> Optional[str]:
        return self.document.id

    @property
    def content(self) -> str:
        return self.document.content

    @property
    def metadata(self) -> Dict[str, Any]:
        return self.document.metadata


@dataclass(frozen=True)
class AdapterInfo:
    """
    Static description of a backend.

    Attributes:
        provider: Provider name the adapter is registered under
        version: Adapter (or backend client) version string
        capabilities: Optional behaviours the backend supports (CAP_* values)
        metric: Distance metric behind `VectorSearchResult.distance`
    """
    provider: str
    version: str
    capabilities: Tuple[str, ...] = ()
    metric: str = "cosine"

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities

    def asdict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["capabilities"] = list(self.capabilities)
        return out

# =============================================================================
# Metrics Interface (low-cardinality, never includes content or embeddings)
# =============================================================================

class MetricsSink(Protocol):
    """
    Protocol for metrics collection implementations.

    Used for operational monitoring; values must stay low-cardinality.
    """
    def observe(
        self,
        *,
        component: str,
        op: str,
        ms: float,
        ok: bool,
        code: str = "OK",
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Record operation timing and status."""
        ...

    def counter(
        self,
        *,
        component: str,
        name: str,
        value: int = 1,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Increment a counter metric."""
        ...


class NoopMetrics:
    """No-operation metrics sink for testing or when metrics are disabled."""
    def observe(self, **_: Any) -> None: ...
    def counter(self, **_: Any) -> None: ...

# =============================================================================
# Stable Adapter Interface
# =============================================================================

@runtime_checkable
class VectorDBAdapter(Protocol):
    """
    The uniform operation set every vector backend provides.

    All data operations are async; `get_info` is synchronous and static.
    """

    async def initialize(self) -> None: ...

    async def insert(self, document: VectorDocument) -> str: ...

    async def insert_batch(self, documents: Sequence[VectorDocument]) -> List[str]: ...

    async def search(
        self,
        embedding: Sequence[float],
        *,
        k: Optional[int] = None,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> List[VectorSearchResult]: ...

    async def update(
        self,
        doc_id: str,
        *,
        content: Optional[str] = None,
        embedding: Optional[Sequence[float]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None: ...

    async def delete(self, doc_id: str) -> None: ...

    async def delete_batch(self, ids: Sequence[str]) -> None: ...

    async def get(self, doc_id: str) -> Optional[VectorDocument]: ...

    async def count(self, filter: Optional[Mapping[str, Any]] = None) -> int: ...

    async def count_by(
        self,
        key: str,
        *,
        filter: Optional[Mapping[str, Any]] = None,
        missing: str = "unknown",
    ) -> Dict[str, int]: ...

    async def list(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> List[VectorDocument]: ...

    async def close(self) -> None: ...

    def get_info(self) -> AdapterInfo: ...

# =============================================================================
# Base Adapter (lifecycle, validation, metrics, batching fallback)
# =============================================================================

def _normalize_value(value: Any, path: str) -> Any:
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(
                f"metadata value at {path} must be a finite number",
                details={"key": path},
            )
        return value
    if isinstance(value, Mapping):
        out: Dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(
                    f"metadata keys must be strings (got {type(key).__name__} at {path})",
                    details={"key": path},
                )
            out[key] = _normalize_value(item, f"{path}.{key}")
        return out
    if isinstance(value, (list, tuple)):
        return [_normalize_value(item, f"{path}[{i}]") for i, item in enumerate(value)]
    raise ValidationError(
        f"metadata value at {path} is not JSON-compatible: {type(value).__name__}",
        details={"key": path},
    )


def _normalize_metadata(metadata: Any) -> Dict[str, Any]:
    """
    Copy metadata into plain JSON types (tuples become lists).

    Every backend stores the same normalized form, so a document read back
    compares equal on all of them.
    """
    if not isinstance(metadata, Mapping):
        raise ValidationError("metadata must be a mapping")
    return _normalize_value(metadata, "metadata")


_STATE_NEW = "new"
_STATE_READY = "ready"
_STATE_CLOSED = "closed"


class BaseVectorAdapter:
    """
    Base class for vector backends.

    Provides lifecycle enforcement, argument validation, id assignment,
    dimension checks, result ordering, metrics instrumentation and error
    normalization. Implementers override the `_do_*` hooks with
    backend-specific single-item primitives.

    Example:
        class MyAdapter(BaseVectorAdapter):
            provider = "mine"

            async def _do_insert(self, document: VectorDocument) -> str:
                ...
    """

    provider = "base"
    _component = "vector"

    def __init__(
        self,
        config: Optional[VectorDBConfig] = None,
        *,
        metrics: Optional[MetricsSink] = None,
    ) -> None:
        self._config = config or VectorDBConfig(provider=self.provider)
        # Resolved once; immutable for the adapter's lifetime.
        self._dimension = resolve_dimension(self._config.options)
        self._metrics: MetricsSink = metrics or NoopMetrics()
        self._state = _STATE_NEW

    # --- properties ---

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def config(self) -> VectorDBConfig:
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._state == _STATE_READY

    @property
    def is_closed(self) -> bool:
        return self._state == _STATE_CLOSED

    # --- internal helpers (validation and instrumentation) ---

    def _ensure_ready(self, op: str) -> None:
        if self._state == _STATE_CLOSED:
            raise ClosedError(
                f"{op} called on a closed adapter",
                details={"op": op, "provider": self.provider},
            )
        if self._state != _STATE_READY:
            raise NotInitialized(
                f"{op} called before initialize()",
                details={"op": op, "provider": self.provider},
            )

    @staticmethod
    def _require_id(doc_id: Any) -> None:
        if not isinstance(doc_id, str) or not doc_id.strip():
            raise ValidationError("document id must be a non-empty string")

    def _validate_embedding(self, embedding: Any, *, name: str = "embedding") -> List[float]:
        """
        Validate that an embedding is a numeric sequence of the configured
        dimension and return it as a list of floats.
        """
        if embedding is None or isinstance(embedding, (str, bytes, Mapping)):
            raise ValidationError(f"{name} must be a sequence of numbers")
        try:
            values = list(embedding)
        except TypeError as exc:
            raise ValidationError(f"{name} must be a sequence of numbers") from exc
        if not all(isinstance(x, numbers.Real) and not isinstance(x, bool) for x in values):
            raise ValidationError(f"{name} must contain only numeric values")
        if not all(math.isfinite(x) for x in values):
            raise ValidationError(f"{name} must not contain NaN or infinite values")
        if len(values) != self._dimension:
            raise DimensionMismatch(
                f"Invalid embedding dimension. Expected {self._dimension}, got {len(values)}",
                details={"expected": self._dimension, "actual": len(values)},
            )
        return [float(x) for x in values]

    @staticmethod
    def _validate_filter(flt: Any) -> Optional[Dict[str, Any]]:
        if flt is None:
            return None
        if not isinstance(flt, Mapping):
            raise ValidationError("filter must be a mapping (dict) when provided")
        for key in flt:
            if not isinstance(key, str) or not key:
                raise ValidationError("filter keys must be non-empty strings")
        return dict(flt) or None

    @staticmethod
    def _validate_non_negative(name: str, value: Any, default: int) -> int:
        if value is None:
            return default
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(f"{name} must be a non-negative integer")
        return value

    def _prepare_document(self, document: VectorDocument) -> VectorDocument:
        """
        Validate a document and assign an id when the caller did not supply one.
        """
        if not isinstance(document, VectorDocument):
            raise ValidationError(
                f"expected VectorDocument, got {type(document).__name__}"
            )
        if document.id is not None:
            self._require_id(document.id)
        if not isinstance(document.content, str):
            raise ValidationError("content must be a string")
        embedding = self._validate_embedding(document.embedding)
        return VectorDocument(
            id=document.id or str(uuid.uuid4()),
            embedding=embedding,
            content=document.content,
            metadata=_normalize_metadata(document.metadata),
        )

    def _record(
        self,
        op: str,
        t0: float,
        ok: bool,
        *,
        code: str = "OK",
        **extra: Any,
    ) -> None:
        """
        Record operation metrics.
        """
        try:
            ms = (time.monotonic() - t0) * 1000.0
            x = dict(extra or {})
            x.setdefault("provider", self.provider)
            self._metrics.observe(
                component=self._component,
                op=op,
                ms=ms,
                ok=ok,
                code=code,
                extra=x or None,
            )
        except Exception:
            # Never let metrics recording break the operation
            pass

    def _count(self, name: str, value: int) -> None:
        try:
            self._metrics.counter(
                component=self._component,
                name=name,
                value=value,
                extra={"provider": self.provider},
            )
        except Exception:
            pass

    async def _instrumented(
        self,
        op: str,
        call: Awaitable[T],
        *,
        wrap: Type[VectorDBError] = StorageError,
        **extra: Any,
    ) -> T:
        """
        Await a backend call, record metrics, and normalize foreign exceptions
        into `wrap` (StorageError unless stated otherwise).
        """
        t0 = time.monotonic()
        try:
            result = await call
        except VectorDBError as e:
            self._record(op, t0, False, code=e.code or type(e).__name__, **extra)
            raise
        except Exception as e:
            self._record(op, t0, False, code=wrap.__name__, **extra)
            raise wrap(
                f"{self.provider} {op} failed: {e}",
                details={"op": op, "provider": self.provider},
            ) from e
        self._record(op, t0, True, **extra)
        return result

    @staticmethod
    def _annotate_batch_error(
        err: VectorDBError,
        *,
        index: int,
        item_id: Optional[str],
        completed: Sequence[str],
    ) -> VectorDBError:
        err.details.update(
            batch_index=index,
            batch_id=item_id,
            completed_ids=list(completed),
        )
        return err

    # --- lifecycle ---

    async def initialize(self) -> None:
        """Establish the backend connection/collection."""
        if self._state == _STATE_CLOSED:
            raise ClosedError(
                "initialize called on a closed adapter",
                details={"op": "initialize", "provider": self.provider},
            )
        if self._state == _STATE_READY:
            LOG.debug("%s adapter already initialized", self.provider)
            return
        await self._instrumented("initialize", self._do_initialize(), wrap=BackendConnectionError)
        self._state = _STATE_READY
        LOG.debug("%s adapter initialized (dimension=%d)", self.provider, self._dimension)

    async def close(self) -> None:
        """Release backend resources. A second call is a no-op."""
        if self._state == _STATE_CLOSED:
            LOG.debug("%s adapter already closed", self.provider)
            return
        try:
            await self._instrumented("close", self._do_close())
        finally:
            self._state = _STATE_CLOSED
            LOG.debug("%s adapter closed", self.provider)

    async def __aenter__(self) -> "BaseVectorAdapter":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # --- final public APIs (validation + instrumentation) ---

    async def insert(self, document: VectorDocument) -> str:
        """Store one document and return its id."""
        self._ensure_ready("insert")
        prepared = self._prepare_document(document)
        doc_id = await self._instrumented("insert", self._do_insert(prepared))
        self._count("documents_inserted", 1)
        return doc_id

    async def insert_batch(self, documents: Sequence[VectorDocument]) -> List[str]:
        """
        Insert documents in input order and return their ids in the same order.

        See the module docstring for the partial-failure contract.
        """
        self._ensure_ready("insert_batch")
        docs = list(documents)
        if not docs:
            return []
        ids = await self._instrumented("insert_batch", self._do_insert_batch(docs), items=len(docs))
        self._count("documents_inserted", len(ids))
        return ids

    async def search(
        self,
        embedding: Sequence[float],
        *,
        k: Optional[int] = None,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> List[VectorSearchResult]:
        """
        Return up to `k` documents most similar to `embedding`, best first.
        """
        self._ensure_ready("search")
        query = self._validate_embedding(embedding)
        if k is None:
            k = DEFAULT_SEARCH_K
        if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
            raise ValidationError("k must be a positive integer")
        flt = self._validate_filter(filter)
        if flt and not self.get_info().supports(CAP_METADATA_FILTER):
            raise NotSupported("metadata filtering is not supported by this adapter")

        raw = await self._instrumented("search", self._do_search(query, k, flt), k=k)
        # Stable sort keeps the backend's order among equal scores.
        ordered = sorted(raw, key=lambda r: r.score, reverse=True)[:k]
        self._count("searches", 1)
        return [replace(r, rank=i) for i, r in enumerate(ordered)]

    async def update(
        self,
        doc_id: str,
        *,
        content: Optional[str] = None,
        embedding: Optional[Sequence[float]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Merge the supplied fields into a stored document.

        Metadata is merged key by key into the existing metadata; content and
        embedding replace the stored values. Raises NotFoundError for unknown ids.
        """
        self._ensure_ready("update")
        self._require_id(doc_id)
        if content is None and embedding is None and metadata is None:
            raise ValidationError("update requires content, embedding or metadata")
        if content is not None and not isinstance(content, str):
            raise ValidationError("content must be a string")
        patch = _normalize_metadata(metadata) if metadata is not None else {}
        vector = self._validate_embedding(embedding) if embedding is not None else None

        async def _apply() -> None:
            existing = await self._do_get(doc_id)
            if existing is None:
                raise NotFoundError(f"Document not found: {doc_id}", details={"id": doc_id})
            merged = VectorDocument(
                id=existing.id,
                embedding=vector if vector is not None else list(existing.embedding),
                content=content if content is not None else existing.content,
                metadata={**existing.metadata, **patch},
            )
            await self._do_update(merged)

        await self._instrumented("update", _apply())

    async def delete(self, doc_id: str) -> None:
        """
        Remove a document. Missing ids follow the backend policy advertised as
        CAP_DELETE_MISSING_NOOP or CAP_DELETE_MISSING_ERROR.
        """
        self._ensure_ready("delete")
        self._require_id(doc_id)
        await self._instrumented("delete", self._do_delete(doc_id))
        self._count("documents_deleted", 1)

    async def delete_batch(self, ids: Sequence[str]) -> None:
        """Delete ids in input order; same fail-fast policy as insert_batch."""
        self._ensure_ready("delete_batch")
        targets = list(ids)
        if not targets:
            return
        await self._instrumented("delete_batch", self._do_delete_batch(targets), items=len(targets))
        self._count("documents_deleted", len(targets))

    async def get(self, doc_id: str) -> Optional[VectorDocument]:
        """Fetch a document by id, or None when absent."""
        self._ensure_ready("get")
        self._require_id(doc_id)
        return await self._instrumented("get", self._do_get(doc_id))

    async def count(self, filter: Optional[Mapping[str, Any]] = None) -> int:
        """Number of documents matching `filter` (all documents when None)."""
        self._ensure_ready("count")
        flt = self._validate_filter(filter)
        if flt and not self.get_info().supports(CAP_METADATA_FILTER):
            raise NotSupported("metadata filtering is not supported by this adapter")
        return int(await self._instrumented("count", self._do_count(flt)))

    async def count_by(
        self,
        key: str,
        *,
        filter: Optional[Mapping[str, Any]] = None,
        missing: str = "unknown",
    ) -> Dict[str, int]:
        """
        Grouped count of documents by `metadata[key]`, computed by the backend.

        Documents without the key are counted under `missing`. Only available
        on adapters advertising CAP_GROUPED_COUNT.
        """
        self._ensure_ready("count_by")
        if not isinstance(key, str) or not key:
            raise ValidationError("key must be a non-empty string")
        if not self.get_info().supports(CAP_GROUPED_COUNT):
            raise NotSupported(
                f"grouped counts are not supported by the {self.provider} adapter",
                details={"provider": self.provider},
            )
        flt = self._validate_filter(filter)
        return await self._instrumented("count_by", self._do_count_by(key, flt, missing))

    async def list(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        filter: Optional[Mapping[str, Any]] = None,
    ) -> List[VectorDocument]:
        """
        Page through documents in a stable, backend-defined order.

        Repeated calls with the same arguments return the same documents in the
        same order as long as the store is not mutated in between.
        """
        self._ensure_ready("list")
        lim = self._validate_non_negative("limit", limit, DEFAULT_LIST_LIMIT)
        off = self._validate_non_negative("offset", offset, DEFAULT_LIST_OFFSET)
        flt = self._validate_filter(filter)
        if flt and not self.get_info().supports(CAP_METADATA_FILTER):
            raise NotSupported("metadata filtering is not supported by this adapter")
        if lim == 0:
            return []
        return await self._instrumented("list", self._do_list(lim, off, flt), limit=lim)

    def get_info(self) -> AdapterInfo:
        """Static backend identity and capabilities."""
        return self._do_info()

    # --- default batching (sequential, fail-fast, no atomicity) ---

    async def _do_insert_batch(self, documents: List[VectorDocument]) -> List[str]:
        ids: List[str] = []
        for index, document in enumerate(documents):
            item_id = getattr(document, "id", None)
            try:
                prepared = self._prepare_document(document)
                ids.append(await self._do_insert(prepared))
            except VectorDBError as err:
                LOG.debug("insert_batch failed at index %d after %d inserts", index, len(ids))
                self._annotate_batch_error(err, index=index, item_id=item_id, completed=ids)
                raise
            except Exception as exc:
                raise StorageError(
                    f"insert_batch failed at index {index}: {exc}",
                    details={"batch_index": index, "batch_id": item_id, "completed_ids": list(ids)},
                ) from exc
        return ids

    async def _do_delete_batch(self, ids: List[str]) -> None:
        done: List[str] = []
        for index, doc_id in enumerate(ids):
            try:
                self._require_id(doc_id)
                await self._do_delete(doc_id)
            except VectorDBError as err:
                LOG.debug("delete_batch failed at index %d after %d deletes", index, len(done))
                self._annotate_batch_error(err, index=index, item_id=doc_id, completed=done)
                raise
            except Exception as exc:
                raise StorageError(
                    f"delete_batch failed at index {index}: {exc}",
                    details={"batch_index": index, "batch_id": doc_id, "completed_ids": list(done)},
                ) from exc
            done.append(doc_id)

    # --- hooks to implement per backend (override these) ---

    async def _do_initialize(self) -> None:
        """Implement to open connections / create collections."""
        raise NotImplementedError

    async def _do_insert(self, document: VectorDocument) -> str:
        """Implement to store a validated document (id already assigned)."""
        raise NotImplementedError

    async def _do_search(
        self,
        embedding: List[float],
        k: int,
        flt: Optional[Dict[str, Any]],
    ) -> List[VectorSearchResult]:
        """Implement similarity search; results need not be ranked."""
        raise NotImplementedError

    async def _do_get(self, doc_id: str) -> Optional[VectorDocument]:
        """Implement fetch-by-id; return None when absent."""
        raise NotImplementedError

    async def _do_update(self, document: VectorDocument) -> None:
        """Implement to overwrite an existing document with merged fields."""
        raise NotImplementedError

    async def _do_delete(self, doc_id: str) -> None:
        """Implement single delete following the advertised missing-id policy."""
        raise NotImplementedError

    async def _do_count(self, flt: Optional[Dict[str, Any]]) -> int:
        """Implement filtered count."""
        raise NotImplementedError

    async def _do_count_by(
        self,
        key: str,
        flt: Optional[Dict[str, Any]],
        missing: str,
    ) -> Dict[str, int]:
        """Implement grouped count (only with CAP_GROUPED_COUNT)."""
        raise NotSupported(f"grouped counts are not supported by the {self.provider} adapter")

    async def _do_list(
        self,
        limit: int,
        offset: int,
        flt: Optional[Dict[str, Any]],
    ) -> List[VectorDocument]:
        """Implement deterministic paged listing."""
        raise NotImplementedError

    async def _do_close(self) -> None:
        """Implement to release connections and handles."""
        raise NotImplementedError

    def _do_info(self) -> AdapterInfo:
        """Implement to return static backend information."""
        raise NotImplementedError

# =============================================================================
# Public Exports
# =============================================================================

__all__ = [
    "CAP_VECTOR_SEARCH",
    "CAP_METADATA_FILTER",
    "CAP_CUSTOM_IDS",
    "CAP_BATCH_OPERATIONS",
    "CAP_ATOMIC_BATCH",
    "CAP_GROUPED_COUNT",
    "CAP_PERSISTENT",
    "CAP_IN_MEMORY",
    "CAP_DELETE_MISSING_NOOP",
    "CAP_DELETE_MISSING_ERROR",
    "VectorDocument",
    "VectorSearchResult",
    "AdapterInfo",
    "MetricsSink",
    "NoopMetrics",
    "VectorDBAdapter",
    "BaseVectorAdapter",
    # errors (re-exported)
    "VectorDBError",
    "ConfigurationError",
    "BackendConnectionError",
    "ValidationError",
    "DimensionMismatch",
    "NotSupported",
    "NotFoundError",
    "StorageError",
    "NotInitialized",
    "ClosedError",
]
