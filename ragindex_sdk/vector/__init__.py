# ragindex_sdk/vector/__init__.py
# SPDX-License-Identifier: Apache-2.0

"""
Vector storage adapters - Public API

All public types, errors and entry points are re-exported here for clean
imports. Backend modules are not imported eagerly; use the registry/factory
or import `ragindex_sdk.vector.<backend>_adapter` directly.
"""

from ragindex_sdk.vector.vector_base import (
    # Capabilities
    CAP_VECTOR_SEARCH,
    CAP_METADATA_FILTER,
    CAP_CUSTOM_IDS,
    CAP_BATCH_OPERATIONS,
    CAP_ATOMIC_BATCH,
    CAP_GROUPED_COUNT,
    CAP_PERSISTENT,
    CAP_IN_MEMORY,
    CAP_DELETE_MISSING_NOOP,
    CAP_DELETE_MISSING_ERROR,

    # Core types
    VectorDocument,
    VectorSearchResult,
    AdapterInfo,

    # Error types
    VectorDBError,
    ConfigurationError,
    BackendConnectionError,
    ValidationError,
    DimensionMismatch,
    NotSupported,
    NotFoundError,
    StorageError,
    NotInitialized,
    ClosedError,

    # Metrics
    MetricsSink,
    NoopMetrics,

    # Protocol interface
    VectorDBAdapter,
    BaseVectorAdapter,
)
from ragindex_sdk.vector.config import (
    DEFAULT_PROVIDER,
    DEFAULT_DIMENSION,
    DEFAULT_SEARCH_K,
    DEFAULT_LIST_LIMIT,
    DEFAULT_LIST_OFFSET,
    VectorDBConfig,
)
from ragindex_sdk.vector.registry import AdapterRegistry, default_registry
from ragindex_sdk.vector.factory import AdapterFactory, default_factory

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
    "MetricsSink",
    "NoopMetrics",
    "VectorDBAdapter",
    "BaseVectorAdapter",
    "DEFAULT_PROVIDER",
    "DEFAULT_DIMENSION",
    "DEFAULT_SEARCH_K",
    "DEFAULT_LIST_LIMIT",
    "DEFAULT_LIST_OFFSET",
    "VectorDBConfig",
    "AdapterRegistry",
    "default_registry",
    "AdapterFactory",
    "default_factory",
]

__version__ = "1.0.0"
