# SPDX-License-Identifier: Apache-2.0
"""
Shared fixtures for the vector storage suites.

Every test that takes the `adapter` fixture runs once per local backend.
Backends can be narrowed with an environment variable:

    RAGINDEX_TEST_PROVIDERS="memory"          # memory only
    RAGINDEX_TEST_PROVIDERS="memory,sqlite"   # default

The sqlite backend is skipped when this interpreter cannot load the
sqlite-vec extension.
"""

from __future__ import annotations

import os
import sqlite3
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest
import pytest_asyncio

from ragindex_sdk.vector import AdapterRegistry, VectorDBConfig, VectorDocument

DIMENSION = 4

PROVIDERS_ENV = "RAGINDEX_TEST_PROVIDERS"
DEFAULT_PROVIDERS = "memory,sqlite"


def _sqlite_vec_available() -> bool:
    try:
        import sqlite_vec

        conn = sqlite3.connect(":memory:")
        try:
            conn.enable_load_extension(True)
            sqlite_vec.load(conn)
        finally:
            conn.close()
    except (ImportError, AttributeError, sqlite3.Error):
        return False
    return True


SQLITE_VEC_AVAILABLE = _sqlite_vec_available()

requires_sqlite_vec = pytest.mark.skipif(
    not SQLITE_VEC_AVAILABLE,
    reason="sqlite-vec extension cannot be loaded by this Python build",
)


def _provider_params() -> List[Any]:
    names = [p.strip() for p in os.getenv(PROVIDERS_ENV, DEFAULT_PROVIDERS).split(",") if p.strip()]
    params = []
    for name in names:
        marks = [requires_sqlite_vec] if name == "sqlite" else []
        params.append(pytest.param(name, id=name, marks=marks))
    return params


@pytest.fixture(params=_provider_params())
def provider(request) -> str:
    """Name of the backend under test."""
    return request.param


@pytest.fixture
def make_adapter(provider: str) -> Callable[..., Any]:
    """Build (without initializing) an adapter for the backend under test."""
    def _make(**options: Any):
        opts: Dict[str, Any] = {"dimension": DIMENSION}
        opts.update(options)
        return AdapterRegistry().create(VectorDBConfig(provider=provider, options=opts))

    return _make


@pytest_asyncio.fixture
async def adapter(make_adapter):
    """An initialized adapter with dimension 4; closed after the test."""
    instance = make_adapter()
    await instance.initialize()
    try:
        yield instance
    finally:
        await instance.close()


@pytest.fixture
def make_doc() -> Callable[..., VectorDocument]:
    """Shorthand for building documents in tests."""
    def _doc(
        doc_id: Optional[str] = None,
        embedding: Sequence[float] = (1.0, 0.0, 0.0, 0.0),
        content: str = "",
        **metadata: Any,
    ) -> VectorDocument:
        return VectorDocument(
            id=doc_id,
            embedding=list(embedding),
            content=content or f"content of {doc_id}",
            metadata=metadata,
        )

    return _doc
