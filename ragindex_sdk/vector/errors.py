# ragindex_sdk/vector/errors.py
# SPDX-License-Identifier: Apache-2.0
"""
Normalized error taxonomy for vector storage adapters.

Every adapter surfaces backend failures as one of these kinds instead of
leaking vendor exception types. Each error carries a machine-readable
`code` (UPPER_SNAKE_CASE) and a shallow, JSON-serializable `details` mapping
that callers can log or use to decide how to react (for batch operations it
identifies the failed item and the items already applied).
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class VectorDBError(Exception):
    """
    Base exception for all vector storage errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (UPPER_SNAKE_CASE)
        details: Additional context-specific details (JSON-serializable)
    """

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details: Dict[str, Any] = dict(details or {})

    def asdict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization and logging."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "details": {k: self.details[k] for k in sorted(self.details)},
        }


# Subclasses set default `code` in UPPER_SNAKE_CASE where not explicitly provided.

class ConfigurationError(VectorDBError):
    """Unknown provider, invalid options, or a backend rejecting its setup."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "CONFIGURATION_ERROR")
        super().__init__(message, **kwargs)


class BackendConnectionError(VectorDBError):
    """Backend is unreachable or the connection could not be established."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "CONNECTION_ERROR")
        super().__init__(message, **kwargs)


class ValidationError(VectorDBError):
    """Malformed document, query, or operation arguments."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "VALIDATION_ERROR")
        super().__init__(message, **kwargs)


class DimensionMismatch(ValidationError):
    """Embedding length does not match the adapter's configured dimension."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "DIMENSION_MISMATCH")
        super().__init__(message, **kwargs)


class NotSupported(VectorDBError):
    """Requested operation is not offered by this adapter's capabilities."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "NOT_SUPPORTED")
        super().__init__(message, **kwargs)


class NotFoundError(VectorDBError):
    """Operation targets a document id that does not exist."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "NOT_FOUND")
        super().__init__(message, **kwargs)


class StorageError(VectorDBError):
    """Generic backend failure while reading or writing."""
    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "STORAGE_ERROR")
        super().__init__(message, **kwargs)


class NotInitialized(VectorDBError):
    """Adapter or service used before `initialize()` completed."""
    def __init__(self, message: str = "Database not initialized", **kwargs: Any):
        kwargs.setdefault("code", "NOT_INITIALIZED")
        super().__init__(message, **kwargs)


class ClosedError(VectorDBError):
    """Adapter used after `close()`."""
    def __init__(self, message: str = "Adapter is closed", **kwargs: Any):
        kwargs.setdefault("code", "CLOSED")
        super().__init__(message, **kwargs)


__all__ = [
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
