# ragindex_sdk/vector/filters.py
# SPDX-License-Identifier: Apache-2.0
"""
Metadata filter helpers.

A filter is a flat mapping of metadata key -> expected value. A document
matches when every key is present in its metadata with an equal value.
An empty or missing filter matches everything.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ragindex_sdk.vector.errors import ValidationError


def values_equal(actual: Any, expected: Any) -> bool:
    """
    JSON equality: booleans never equal numbers, containers compare element-wise.

    Mirrors how SQLite compares JSON values, so in-process filtering agrees
    with `build_sql_where`.
    """
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    if isinstance(actual, Mapping) and isinstance(expected, Mapping):
        return actual.keys() == expected.keys() and all(
            values_equal(actual[k], expected[k]) for k in actual
        )
    if isinstance(actual, (list, tuple)) and isinstance(expected, (list, tuple)):
        return len(actual) == len(expected) and all(
            values_equal(a, e) for a, e in zip(actual, expected)
        )
    if isinstance(actual, (Mapping, list, tuple)) or isinstance(expected, (Mapping, list, tuple)):
        return False
    return actual == expected


def matches_filter(metadata: Optional[Mapping[str, Any]], flt: Optional[Mapping[str, Any]]) -> bool:
    """In-process equality match used by backends without a query language."""
    if not flt:
        return True
    if not metadata:
        return False
    for key, expected in flt.items():
        if key not in metadata or not values_equal(metadata[key], expected):
            return False
    return True


def bucket_label(value: Any, missing: str) -> str:
    """
    Label used when grouping documents by a metadata value.

    Strings are used as-is, absent or null values fall into `missing`, and
    everything else is rendered as JSON (`true`, `3`, `["a"]`).
    """
    if value is None:
        return missing
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True)


def json_path(key: str) -> str:
    """SQLite JSON path addressing a top-level metadata key."""
    if '"' in key:
        raise ValidationError(
            "filter keys must not contain double quotes",
            details={"key": key},
        )
    return f'$."{key}"'


def build_sql_where(
    flt: Optional[Mapping[str, Any]],
    *,
    column: str = "metadata",
) -> Tuple[str, List[Any]]:
    """
    Translate a filter into a SQL predicate over a JSON text column.

    Returns `(clause, params)`; the clause is empty when there is nothing to
    filter on. Paths and values are always bound, never interpolated.
    """
    if not flt:
        return "", []
    clauses: List[str] = []
    params: List[Any] = []
    for key, value in flt.items():
        path = json_path(key)
        if value is None:
            clauses.append(f"json_type({column}, ?) = 'null'")
            params.append(path)
        elif isinstance(value, (dict, list)):
            clauses.append(f"json_extract({column}, ?) = json(?)")
            params.extend([path, json.dumps(value)])
        elif isinstance(value, bool):
            # JSON booleans surface from json_extract as 1/0 with type true/false
            clauses.append(f"json_type({column}, ?) = ?")
            params.extend([path, "true" if value else "false"])
        elif isinstance(value, (int, float)):
            # Numbers never match JSON booleans, which json_extract also yields as 1/0.
            clauses.append(
                f"json_extract({column}, ?) = ? AND json_type({column}, ?) IN ('integer', 'real')"
            )
            params.extend([path, value, path])
        elif isinstance(value, str):
            clauses.append(f"json_extract({column}, ?) = ?")
            params.extend([path, value])
        else:
            raise ValidationError(
                f"unsupported filter value type {type(value).__name__}",
                details={"key": key},
            )
    return " AND ".join(clauses), params


def to_pinecone_filter(flt: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """Express an equality filter in Pinecone's `$eq` operator syntax."""
    if not flt:
        return None
    return {key: {"$eq": value} for key, value in flt.items()}


__all__ = [
    "values_equal",
    "matches_filter",
    "bucket_label",
    "json_path",
    "build_sql_where",
    "to_pinecone_filter",
]
