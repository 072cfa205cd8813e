# SPDX-License-Identifier: Apache-2.0
"""
SQLite adapter specifics: persistence, source rows, atomic batches.
"""

import sqlite3

import pytest

from ragindex_sdk.vector import (
    CAP_ATOMIC_BATCH,
    CAP_GROUPED_COUNT,
    ConfigurationError,
    NotFoundError,
    StorageError,
    ValidationError,
    VectorDBConfig,
    VectorDBError,
    VectorDocument,
)
from tests.conftest import requires_sqlite_vec

pytestmark = [pytest.mark.asyncio, requires_sqlite_vec]


def _adapter(path, dimension=4):
    from ragindex_sdk.vector.sqlite_adapter import SQLiteVectorAdapter

    return SQLiteVectorAdapter(
        VectorDBConfig(provider="sqlite", options={"path": str(path), "dimension": dimension})
    )


def _doc(doc_id, embedding=(1.0, 0.0, 0.0, 0.0), **metadata):
    return VectorDocument(id=doc_id, embedding=list(embedding), content=f"text {doc_id}", metadata=metadata)


async def test_documents_survive_reopen(tmp_path):
    path = tmp_path / "nested" / "index.db"

    async with _adapter(path) as adapter:
        await adapter.insert_batch([_doc("a", sourceType="web"), _doc("b", [0.0, 1.0, 0.0, 0.0])])

    async with _adapter(path) as reopened:
        assert await reopened.count() == 2
        assert (await reopened.get("a")).metadata == {"sourceType": "web"}
        assert [r.id for r in await reopened.search([0.0, 1.0, 0.0, 0.0], k=1)] == ["b"]


async def test_original_content_is_stored_once_per_source(tmp_path):
    path = tmp_path / "index.db"

    async with _adapter(path) as adapter:
        await adapter.insert_batch([
            _doc("c0", sourceId="s", chunkIndex=0, originalContent="full", title="T"),
            _doc("c1", [0.0, 1.0, 0.0, 0.0], sourceId="s", chunkIndex=1),
        ])

    conn = sqlite3.connect(str(path))
    try:
        sources = conn.execute("SELECT source_id, original_content, title FROM sources").fetchall()
        stored_meta = conn.execute("SELECT metadata FROM documents ORDER BY seq").fetchall()
    finally:
        conn.close()

    assert sources == [("s", "full", "T")]
    assert all("originalContent" not in m[0] for m in stored_meta)


async def test_source_row_removed_with_last_chunk(tmp_path):
    path = tmp_path / "index.db"

    async with _adapter(path) as adapter:
        await adapter.insert_batch([
            _doc("c0", sourceId="s", chunkIndex=0, originalContent="full"),
            _doc("c1", sourceId="s", chunkIndex=1),
        ])
        await adapter.delete("c0")

        conn = sqlite3.connect(str(path))
        try:
            assert conn.execute("SELECT COUNT(*) FROM sources").fetchone()[0] == 1
        finally:
            conn.close()

        await adapter.delete("c1")

    conn = sqlite3.connect(str(path))
    try:
        assert conn.execute("SELECT COUNT(*) FROM sources").fetchone()[0] == 0
    finally:
        conn.close()


async def test_delete_missing_raises_not_found(tmp_path):
    async with _adapter(tmp_path / "index.db") as adapter:
        with pytest.raises(NotFoundError) as exc_info:
            await adapter.delete("missing")

    assert exc_info.value.details == {"id": "missing"}


async def test_insert_batch_rejects_non_json_metadata_before_writing(tmp_path):
    async with _adapter(tmp_path / "index.db") as adapter:
        with pytest.raises(ValidationError) as exc_info:
            await adapter.insert_batch([
                _doc("a"),
                _doc("b", payload={1, 2}),
                _doc("c"),
            ])

        details = exc_info.value.details
        assert details["batch_index"] == 1
        assert details["batch_id"] == "b"
        assert details["completed_ids"] == []
        assert await adapter.count() == 0


async def test_insert_batch_rolls_back_on_driver_error(tmp_path, monkeypatch):
    from ragindex_sdk.vector.sqlite_adapter import SQLiteVectorAdapter

    original_write = SQLiteVectorAdapter._write

    def failing_write(self, conn, document):
        if document.id == "b":
            raise sqlite3.IntegrityError("constraint failed")
        return original_write(self, conn, document)

    monkeypatch.setattr(SQLiteVectorAdapter, "_write", failing_write)

    async with _adapter(tmp_path / "index.db") as adapter:
        assert adapter.get_info().supports(CAP_ATOMIC_BATCH)

        with pytest.raises(StorageError) as exc_info:
            await adapter.insert_batch([_doc("a"), _doc("b"), _doc("c")])

        details = exc_info.value.details
        assert details["batch_index"] == 1
        assert details["batch_id"] == "b"
        assert details["rolled_back"] is True
        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)
        assert await adapter.count() == 0


async def test_filtered_search_ranks_by_l2_distance(tmp_path):
    async with _adapter(tmp_path / "index.db") as adapter:
        await adapter.insert_batch([
            _doc("near", [1.0, 0.1, 0.0, 0.0], kind="x"),
            _doc("nearest", [1.0, 0.0, 0.0, 0.0], kind="y"),
            _doc("far", [0.0, 0.0, 5.0, 0.0], kind="x"),
        ])

        results = await adapter.search([1.0, 0.0, 0.0, 0.0], k=5, filter={"kind": "x"})

    assert [r.id for r in results] == ["near", "far"]
    assert results[0].distance == pytest.approx(0.1, rel=1e-4)
    assert results[0].score == pytest.approx(1.0 / 1.1, rel=1e-4)
    assert adapter.get_info().metric == "l2"


async def test_grouped_count_uses_sql(tmp_path):
    async with _adapter(tmp_path / "index.db") as adapter:
        assert adapter.get_info().supports(CAP_GROUPED_COUNT)
        await adapter.insert_batch([
            _doc("a", sourceType="web"),
            _doc("b", sourceType="gist"),
            _doc("c"),
        ])

        assert await adapter.count_by("sourceType", missing="none") == {"web": 1, "gist": 1, "none": 1}


async def test_reopening_with_another_dimension_is_a_configuration_error(tmp_path):
    path = tmp_path / "index.db"
    async with _adapter(path, dimension=4) as adapter:
        await adapter.insert(_doc("a"))

    mismatched = _adapter(path, dimension=8)
    with pytest.raises(ConfigurationError) as exc_info:
        await mismatched.initialize()

    assert exc_info.value.details == {"expected": 8, "actual": 4}
    assert not mismatched.is_initialized

    async with _adapter(path, dimension=4) as reopened:
        assert await reopened.count() == 1


async def test_connection_is_closed_when_schema_setup_fails(tmp_path, monkeypatch):
    from ragindex_sdk.vector import sqlite_adapter

    closed = []
    real_connect = sqlite3.connect

    class TrackingConnection(sqlite3.Connection):
        def close(self):
            closed.append(True)
            super().close()

    def connect(*args, **kwargs):
        return real_connect(*args, factory=TrackingConnection, **kwargs)

    def broken_schema(dimension):
        return "CREATE TABLE broken ("

    monkeypatch.setattr(sqlite_adapter.sqlite3, "connect", connect)
    monkeypatch.setattr(sqlite_adapter, "_schema", broken_schema)

    adapter = _adapter(tmp_path / "index.db")
    with pytest.raises(VectorDBError):
        await adapter.initialize()

    assert closed == [True]


async def test_grouped_count_keeps_json_types_apart(tmp_path):
    async with _adapter(tmp_path / "index.db") as adapter:
        await adapter.insert_batch([
            _doc("a", sourceType=True),
            _doc("b", sourceType=1),
            _doc("c", sourceType="web"),
            _doc("d", sourceType=None),
        ])

        assert await adapter.count_by("sourceType") == {"true": 1, "1": 1, "web": 1, "unknown": 1}
