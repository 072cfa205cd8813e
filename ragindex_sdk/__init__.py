# ragindex_sdk/__init__.py
# SPDX-License-Identifier: Apache-2.0

"""
RAG Index SDK

Backend-neutral vector storage for retrieval pipelines: the adapter contract
and built-in backends live in `ragindex_sdk.vector`, the session facade in
`ragindex_sdk.database`.
"""

from ragindex_sdk.vector import (
    VectorDocument,
    VectorSearchResult,
    AdapterInfo,
    VectorDBConfig,
    VectorDBError,
    AdapterRegistry,
    AdapterFactory,
    __version__,
)
from ragindex_sdk.database import (
    DatabaseService,
    DatabaseStats,
    DatabaseOperations,
    database_session,
)

__all__ = [
    "VectorDocument",
    "VectorSearchResult",
    "AdapterInfo",
    "VectorDBConfig",
    "VectorDBError",
    "AdapterRegistry",
    "AdapterFactory",
    "DatabaseService",
    "DatabaseStats",
    "DatabaseOperations",
    "database_session",
    "__version__",
]
