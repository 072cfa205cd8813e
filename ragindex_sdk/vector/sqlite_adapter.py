# ragindex_sdk/vector/sqlite_adapter.py
# SPDX-License-Identifier: Apache-2.0
"""
SQLite vector adapter backed by the `sqlite-vec` extension.

Storage layout
--------------
- `sources`        one row per source document (`metadata["sourceId"]`),
                   holding the full `originalContent` once instead of
                   repeating it on every chunk
- `documents`      one row per chunk: id, content, metadata (JSON text),
                   embedding (JSON text, exact values)
- `vec_documents`  `vec0` virtual table with the float32 embedding, keyed by
                   `documents.seq`; used for KNN search

The stdlib `sqlite3` driver is blocking, so every statement runs on a worker
thread via `asyncio.to_thread`, serialized by a lock around the single
connection. Multi-statement writes run inside explicit transactions;
`insert_batch` commits all documents or none.

Options
-------
    path       database file (default ":memory:")
    dimension  embedding dimension (default 768)
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import sqlite3
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, TypeVar

import sqlite_vec

from ragindex_sdk.vector.filters import bucket_label, build_sql_where, json_path
from ragindex_sdk.vector.vector_base import (
    CAP_ATOMIC_BATCH,
    CAP_BATCH_OPERATIONS,
    CAP_CUSTOM_IDS,
    CAP_DELETE_MISSING_ERROR,
    CAP_GROUPED_COUNT,
    CAP_METADATA_FILTER,
    CAP_PERSISTENT,
    CAP_VECTOR_SEARCH,
    AdapterInfo,
    BaseVectorAdapter,
    ConfigurationError,
    NotFoundError,
    StorageError,
    ValidationError,
    VectorDBError,
    VectorDocument,
    VectorSearchResult,
)

LOG = logging.getLogger(__name__)

T = TypeVar("T")

ADAPTER_VERSION = "1.0.0"
DEFAULT_PATH = ":memory:"

# vec0 rejects KNN queries with k above this; larger k falls back to a scan.
_KNN_MAX_K = 4096

_VEC_DIMENSION = re.compile(r"float\[(\d+)\]", re.IGNORECASE)

_ORIGINAL_CONTENT_KEY = "originalContent"
_SOURCE_ID_KEY = "sourceId"

# ------------------------------- schema ------------------------------------ #


def _schema(dimension: int) -> str:
    return f"""
    CREATE TABLE IF NOT EXISTS sources (
      source_id TEXT PRIMARY KEY,
      original_content TEXT NOT NULL,
      title TEXT,
      url TEXT,
      source_type TEXT,
      created_at TEXT DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS documents (
      seq INTEGER PRIMARY KEY AUTOINCREMENT,
      id TEXT NOT NULL UNIQUE,
      source_id TEXT,
      content TEXT NOT NULL,
      metadata TEXT NOT NULL DEFAULT '{{}}',
      embedding TEXT NOT NULL,
      holds_original INTEGER NOT NULL DEFAULT 0,
      created_at TEXT DEFAULT CURRENT_TIMESTAMP,
      updated_at TEXT DEFAULT CURRENT_TIMESTAMP
    );

    CREATE VIRTUAL TABLE IF NOT EXISTS vec_documents
    USING vec0(embedding float[{dimension}]);

    CREATE INDEX IF NOT EXISTS idx_sources_source_type ON sources(source_type);
    CREATE INDEX IF NOT EXISTS idx_documents_source_id ON documents(source_id);
    """


_DOCUMENT_COLUMNS = """
    d.id, d.content, d.metadata, d.embedding, d.holds_original,
    s.original_content
"""

_SELECT_DOCUMENTS = f"""
    SELECT {_DOCUMENT_COLUMNS}
    FROM documents d
    LEFT JOIN sources s ON s.source_id = d.source_id
"""

_KNN_SEARCH = f"""
    SELECT {_DOCUMENT_COLUMNS}, knn.distance AS distance
    FROM (
      SELECT rowid, distance FROM vec_documents
      WHERE embedding MATCH ? AND k = ?
    ) AS knn
    JOIN documents d ON d.seq = knn.rowid
    LEFT JOIN sources s ON s.source_id = d.source_id
    ORDER BY knn.distance, d.seq
"""

# ------------------------------- helpers ----------------------------------- #


@contextmanager
def _transaction(conn: sqlite3.Connection) -> Iterator[None]:
    conn.execute("BEGIN")
    try:
        yield
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


def _encode_metadata(metadata: Dict[str, Any]) -> str:
    try:
        return json.dumps(metadata)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"metadata must be JSON-serializable: {exc}") from exc


def _json_value(kind: Optional[str], value: Any) -> Any:
    """Rebuild the Python value of a `json_extract` result given its `json_type`."""
    if kind is None or kind == "null":
        return None
    if kind == "true":
        return True
    if kind == "false":
        return False
    if kind in ("object", "array"):
        return json.loads(value)
    return value


def _stored_dimension(conn: sqlite3.Connection) -> Optional[int]:
    """Dimension declared by an existing `vec_documents` table, if any."""
    row = conn.execute(
        "SELECT sql FROM sqlite_master WHERE type = 'table' AND name = 'vec_documents'"
    ).fetchone()
    if row is None or not row[0]:
        return None
    match = _VEC_DIMENSION.search(row[0])
    return int(match.group(1)) if match else None


def _row_to_document(row: sqlite3.Row) -> VectorDocument:
    metadata = json.loads(row["metadata"]) if row["metadata"] else {}
    if row["holds_original"] and row["original_content"] is not None:
        metadata[_ORIGINAL_CONTENT_KEY] = row["original_content"]
    return VectorDocument(
        id=row["id"],
        embedding=[float(x) for x in json.loads(row["embedding"])],
        content=row["content"],
        metadata=metadata,
    )


def _row_to_result(row: sqlite3.Row) -> VectorSearchResult:
    distance = max(0.0, float(row["distance"]))
    return VectorSearchResult(
        document=_row_to_document(row),
        score=1.0 / (1.0 + distance),
        distance=distance,
    )

# ----------------------------- adapter class ------------------------------- #


class SQLiteVectorAdapter(BaseVectorAdapter):
    """
    Persistent adapter on SQLite + sqlite-vec.

    Re-inserting an existing id rewrites that document in place. Deleting an
    unknown id raises NotFoundError.
    """

    provider = "sqlite"

    def __init__(self, config=None, **kwargs: Any) -> None:
        super().__init__(config, **kwargs)
        self._path = str(self._config.options.get("path") or DEFAULT_PATH)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    # --------------------------- thread plumbing --------------------------- #

    def _locked(self, func: Callable[..., T], *args: Any) -> T:
        with self._lock:
            if self._conn is None:
                raise StorageError("SQLite connection is not open")
            return func(self._conn, *args)

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        """Run `func(conn, *args)` on a worker thread holding the connection lock."""
        return await asyncio.to_thread(self._locked, func, *args)

    # ------------------------------ lifecycle ------------------------------ #

    def _open(self) -> sqlite3.Connection:
        if self._path != DEFAULT_PATH:
            parent = os.path.dirname(os.path.abspath(self._path))
            os.makedirs(parent, exist_ok=True)

        # Autocommit mode; transactions are opened explicitly.
        conn = sqlite3.connect(self._path, check_same_thread=False, isolation_level=None)
        try:
            conn.enable_load_extension(True)
            sqlite_vec.load(conn)
            conn.enable_load_extension(False)
        except (AttributeError, sqlite3.Error) as exc:
            conn.close()
            raise ConfigurationError(
                "Failed to load the sqlite-vec extension; this Python build may not "
                "support SQLite extensions. Use the 'memory' provider instead.",
                details={"path": self._path},
            ) from exc

        try:
            conn.row_factory = sqlite3.Row
            stored = _stored_dimension(conn)
            if stored is not None and stored != self._dimension:
                raise ConfigurationError(
                    f"SQLite store at {self._path} was created with dimension {stored}, "
                    f"but the adapter is configured for {self._dimension}",
                    details={"expected": self._dimension, "actual": stored},
                )
            conn.executescript(_schema(self._dimension))
        except BaseException:
            conn.close()
            raise
        return conn

    async def _do_initialize(self) -> None:
        self._conn = await asyncio.to_thread(self._open)
        LOG.debug("Opened SQLite vector store at %s", self._path)

    async def _do_close(self) -> None:
        def _close() -> None:
            with self._lock:
                if self._conn is not None:
                    self._conn.close()
                    self._conn = None

        await asyncio.to_thread(_close)

    def _do_info(self) -> AdapterInfo:
        return AdapterInfo(
            provider=self.provider,
            version=ADAPTER_VERSION,
            capabilities=(
                CAP_VECTOR_SEARCH,
                CAP_METADATA_FILTER,
                CAP_CUSTOM_IDS,
                CAP_BATCH_OPERATIONS,
                CAP_ATOMIC_BATCH,
                CAP_GROUPED_COUNT,
                CAP_PERSISTENT,
                CAP_DELETE_MISSING_ERROR,
            ),
            metric="l2",
        )

    # ------------------------------ sources -------------------------------- #

    @staticmethod
    def _attach_source(
        conn: sqlite3.Connection,
        metadata: Dict[str, Any],
    ) -> Tuple[Optional[str], bool]:
        """
        Link a document to its source row, creating the row on first sight.

        When the document carries the source's `originalContent`, the value is
        removed from `metadata` (it lives in `sources`) and the returned flag
        tells readers to re-attach it.
        """
        raw_source = metadata.get(_SOURCE_ID_KEY)
        if raw_source is None:
            return None, False
        source_id = str(raw_source)

        original = metadata.get(_ORIGINAL_CONTENT_KEY)
        if not isinstance(original, str) or not original:
            return source_id, False

        row = conn.execute(
            "SELECT original_content FROM sources WHERE source_id = ?", (source_id,)
        ).fetchone()
        if row is None:
            conn.execute(
                "INSERT INTO sources (source_id, original_content, title, url, source_type) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    source_id,
                    original,
                    metadata.get("title"),
                    metadata.get("url"),
                    metadata.get("sourceType"),
                ),
            )
            stored = original
        else:
            stored = row["original_content"]

        if stored != original:
            return source_id, False
        del metadata[_ORIGINAL_CONTENT_KEY]
        return source_id, True

    @staticmethod
    def _prune_source(conn: sqlite3.Connection, source_id: Optional[str]) -> None:
        if source_id is None:
            return
        remaining = conn.execute(
            "SELECT COUNT(*) FROM documents WHERE source_id = ?", (source_id,)
        ).fetchone()[0]
        if remaining == 0:
            conn.execute("DELETE FROM sources WHERE source_id = ?", (source_id,))

    # ------------------------------ writes --------------------------------- #

    def _write(self, conn: sqlite3.Connection, document: VectorDocument) -> str:
        metadata = dict(document.metadata)
        source_id, holds_original = self._attach_source(conn, metadata)
        encoded = _encode_metadata(metadata)
        embedding_json = json.dumps(list(document.embedding))
        blob = sqlite_vec.serialize_float32(list(document.embedding))

        existing = conn.execute(
            "SELECT seq, source_id FROM documents WHERE id = ?", (document.id,)
        ).fetchone()
        if existing is None:
            cur = conn.execute(
                "INSERT INTO documents (id, source_id, content, metadata, embedding, holds_original) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (document.id, source_id, document.content, encoded, embedding_json, int(holds_original)),
            )
            seq = cur.lastrowid
        else:
            seq = existing["seq"]
            conn.execute(
                "UPDATE documents SET source_id = ?, content = ?, metadata = ?, embedding = ?, "
                "holds_original = ?, updated_at = CURRENT_TIMESTAMP WHERE seq = ?",
                (source_id, document.content, encoded, embedding_json, int(holds_original), seq),
            )
            conn.execute("DELETE FROM vec_documents WHERE rowid = ?", (seq,))
            if existing["source_id"] != source_id:
                self._prune_source(conn, existing["source_id"])

        conn.execute(
            "INSERT INTO vec_documents (rowid, embedding) VALUES (?, ?)", (seq, blob)
        )
        return document.id

    def _insert_sync(self, conn: sqlite3.Connection, document: VectorDocument) -> str:
        with _transaction(conn):
            return self._write(conn, document)

    def _insert_many_sync(
        self,
        conn: sqlite3.Connection,
        documents: List[VectorDocument],
    ) -> List[str]:
        ids: List[str] = []
        with _transaction(conn):
            for index, document in enumerate(documents):
                try:
                    ids.append(self._write(conn, document))
                except VectorDBError as err:
                    self._annotate_batch_error(err, index=index, item_id=document.id, completed=[])
                    err.details["rolled_back"] = True
                    raise
                except sqlite3.Error as exc:
                    raise StorageError(
                        f"insert_batch failed at index {index}: {exc}",
                        details={
                            "batch_index": index,
                            "batch_id": document.id,
                            "completed_ids": [],
                            "rolled_back": True,
                        },
                    ) from exc
        return ids

    def _delete_sync(self, conn: sqlite3.Connection, doc_id: str) -> None:
        with _transaction(conn):
            row = conn.execute(
                "SELECT seq, source_id FROM documents WHERE id = ?", (doc_id,)
            ).fetchone()
            if row is None:
                raise NotFoundError(f"Document not found: {doc_id}", details={"id": doc_id})
            conn.execute("DELETE FROM documents WHERE seq = ?", (row["seq"],))
            conn.execute("DELETE FROM vec_documents WHERE rowid = ?", (row["seq"],))
            self._prune_source(conn, row["source_id"])

    async def _do_insert(self, document: VectorDocument) -> str:
        return await self._run(self._insert_sync, document)

    async def _do_insert_batch(self, documents: List[VectorDocument]) -> List[str]:
        prepared: List[VectorDocument] = []
        for index, document in enumerate(documents):
            try:
                prepared.append(self._prepare_document(document))
            except VectorDBError as err:
                self._annotate_batch_error(
                    err, index=index, item_id=getattr(document, "id", None), completed=[]
                )
                raise
        LOG.debug("Inserting %d documents in one transaction", len(prepared))
        return await self._run(self._insert_many_sync, prepared)

    async def _do_update(self, document: VectorDocument) -> None:
        await self._run(self._insert_sync, document)

    async def _do_delete(self, doc_id: str) -> None:
        await self._run(self._delete_sync, doc_id)

    # ------------------------------ reads ---------------------------------- #

    async def _do_get(self, doc_id: str) -> Optional[VectorDocument]:
        def _get(conn: sqlite3.Connection) -> Optional[VectorDocument]:
            row = conn.execute(f"{_SELECT_DOCUMENTS} WHERE d.id = ?", (doc_id,)).fetchone()
            return _row_to_document(row) if row is not None else None

        return await self._run(_get)

    async def _do_search(
        self,
        embedding: List[float],
        k: int,
        flt: Optional[Dict[str, Any]],
    ) -> List[VectorSearchResult]:
        blob = sqlite_vec.serialize_float32(embedding)
        where, params = build_sql_where(flt, column="d.metadata")

        def _search(conn: sqlite3.Connection) -> List[VectorSearchResult]:
            if not where and k <= _KNN_MAX_K:
                rows = conn.execute(_KNN_SEARCH, (blob, k)).fetchall()
            else:
                # Filtered search scans the matching rows and ranks them exactly.
                sql = (
                    f"SELECT {_DOCUMENT_COLUMNS}, vec_distance_l2(d.embedding, ?) AS distance "
                    "FROM documents d LEFT JOIN sources s ON s.source_id = d.source_id "
                    + (f"WHERE {where} " if where else "")
                    + "ORDER BY distance, d.seq LIMIT ?"
                )
                rows = conn.execute(sql, (blob, *params, k)).fetchall()
            return [_row_to_result(r) for r in rows]

        return await self._run(_search)

    async def _do_count(self, flt: Optional[Dict[str, Any]]) -> int:
        where, params = build_sql_where(flt, column="d.metadata")
        sql = "SELECT COUNT(*) FROM documents d" + (f" WHERE {where}" if where else "")

        def _count(conn: sqlite3.Connection) -> int:
            return int(conn.execute(sql, params).fetchone()[0])

        return await self._run(_count)

    async def _do_count_by(
        self,
        key: str,
        flt: Optional[Dict[str, Any]],
        missing: str,
    ) -> Dict[str, int]:
        where, params = build_sql_where(flt, column="d.metadata")
        path = json_path(key)
        sql = (
            "SELECT json_type(d.metadata, ?) AS kind, json_extract(d.metadata, ?) AS bucket, "
            "COUNT(*) AS n FROM documents d"
            + (f" WHERE {where}" if where else "")
            + " GROUP BY kind, bucket"
        )

        def _count_by(conn: sqlite3.Connection) -> Dict[str, int]:
            out: Dict[str, int] = {}
            for row in conn.execute(sql, (path, path, *params)).fetchall():
                label = bucket_label(_json_value(row["kind"], row["bucket"]), missing)
                out[label] = out.get(label, 0) + int(row["n"])
            return out

        return await self._run(_count_by)

    async def _do_list(
        self,
        limit: int,
        offset: int,
        flt: Optional[Dict[str, Any]],
    ) -> List[VectorDocument]:
        where, params = build_sql_where(flt, column="d.metadata")
        sql = (
            _SELECT_DOCUMENTS
            + (f" WHERE {where}" if where else "")
            + " ORDER BY d.seq LIMIT ? OFFSET ?"
        )

        def _list(conn: sqlite3.Connection) -> List[VectorDocument]:
            return [_row_to_document(r) for r in conn.execute(sql, (*params, limit, offset))]

        return await self._run(_list)


__all__ = ["SQLiteVectorAdapter"]
