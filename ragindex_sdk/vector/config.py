# ragindex_sdk/vector/config.py
# SPDX-License-Identifier: Apache-2.0
"""
Adapter configuration and defaults.

A configuration names the backend (`provider`) and carries backend-specific
`options`. The only option every backend understands is `dimension`, the
fixed embedding length for an adapter instance.

Environment
-----------
`VectorDBConfig.from_env()` reads:

    VECTOR_DB_PROVIDER   provider name (default: "memory")
    VECTOR_DB_CONFIG     JSON object merged into options
    SQLITE_DB_PATH       sqlite only: database file path
    EMBEDDING_DIMENSION  sqlite only: embedding dimension
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ragindex_sdk.vector.errors import ConfigurationError

LOG = logging.getLogger(__name__)

DEFAULT_PROVIDER = "memory"
DEFAULT_DIMENSION = 768
DEFAULT_SEARCH_K = 5
DEFAULT_LIST_LIMIT = 100
DEFAULT_LIST_OFFSET = 0

PROVIDER_ENV = "VECTOR_DB_PROVIDER"
OPTIONS_ENV = "VECTOR_DB_CONFIG"
SQLITE_PATH_ENV = "SQLITE_DB_PATH"
DIMENSION_ENV = "EMBEDDING_DIMENSION"


def resolve_dimension(options: Optional[Mapping[str, Any]]) -> int:
    """
    Resolve the embedding dimension from adapter options.

    Uses `options["dimension"]` when present, otherwise DEFAULT_DIMENSION.
    """
    raw = (options or {}).get("dimension")
    if raw is None:
        return DEFAULT_DIMENSION
    if isinstance(raw, bool) or not isinstance(raw, int) or raw <= 0:
        raise ConfigurationError(
            f"dimension must be a positive integer, got {raw!r}",
            details={"dimension": repr(raw)},
        )
    return raw


@dataclass(frozen=True)
class VectorDBConfig:
    """
    Backend selection plus backend-specific options.

    Attributes:
        provider: Registered provider name (e.g. "memory", "sqlite", "pinecone")
        options: Backend settings; `dimension` is shared by all backends
    """
    provider: str = DEFAULT_PROVIDER
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.provider, str) or not self.provider.strip():
            raise ConfigurationError("provider must be a non-empty string")
        if not isinstance(self.options, Mapping):
            raise ConfigurationError("options must be a mapping")
        object.__setattr__(self, "options", dict(self.options))

    @property
    def dimension(self) -> int:
        return resolve_dimension(self.options)

    def merged(self, other: Optional["VectorDBConfig"]) -> "VectorDBConfig":
        """Overlay `other` on top of this config; options merge shallowly."""
        if other is None:
            return VectorDBConfig(provider=self.provider, options=dict(self.options))
        return VectorDBConfig(
            provider=other.provider,
            options={**self.options, **other.options},
        )

    def cache_key(self) -> str:
        """Stable key identifying this configuration (used for singletons)."""
        return json.dumps(
            {"provider": self.provider, "options": self.options},
            sort_keys=True,
            default=repr,
        )

    @classmethod
    def coerce(cls, value: Any) -> Optional["VectorDBConfig"]:
        """Accept a VectorDBConfig, a `{provider, options}` mapping, or None."""
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(
                provider=value.get("provider", DEFAULT_PROVIDER),
                options=dict(value.get("options") or {}),
            )
        raise ConfigurationError(
            f"unsupported configuration type {type(value).__name__}"
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "VectorDBConfig":
        """Build a configuration from environment variables."""
        env = os.environ if environ is None else environ
        provider = env.get(PROVIDER_ENV) or DEFAULT_PROVIDER

        options: Dict[str, Any] = {}
        raw_options = env.get(OPTIONS_ENV)
        if raw_options:
            try:
                parsed = json.loads(raw_options)
            except ValueError as exc:
                LOG.warning("Failed to parse %s: %s", OPTIONS_ENV, exc)
            else:
                if isinstance(parsed, dict):
                    options = parsed
                else:
                    LOG.warning("%s must be a JSON object; ignoring it", OPTIONS_ENV)

        if provider == "sqlite":
            if env.get(SQLITE_PATH_ENV):
                options["path"] = env[SQLITE_PATH_ENV]
            if env.get(DIMENSION_ENV):
                try:
                    options["dimension"] = int(env[DIMENSION_ENV])
                except ValueError as exc:
                    raise ConfigurationError(
                        f"{DIMENSION_ENV} must be an integer",
                        details={"value": env[DIMENSION_ENV]},
                    ) from exc

        return cls(provider=provider, options=options)


__all__ = [
    "DEFAULT_PROVIDER",
    "DEFAULT_DIMENSION",
    "DEFAULT_SEARCH_K",
    "DEFAULT_LIST_LIMIT",
    "DEFAULT_LIST_OFFSET",
    "VectorDBConfig",
    "resolve_dimension",
]
