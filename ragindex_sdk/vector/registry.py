# ragindex_sdk/vector/registry.py
# SPDX-License-Identifier: Apache-2.0
"""
Provider registry.

Maps provider names to adapter constructors. The built-in providers
(`memory`, `sqlite`, `pinecone`) are registered on first use, and their
modules are imported only when an adapter is actually created, so a missing
optional backend never breaks the others.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from ragindex_sdk.vector.config import VectorDBConfig
from ragindex_sdk.vector.errors import ConfigurationError
from ragindex_sdk.vector.vector_base import VectorDBAdapter

LOG = logging.getLogger(__name__)

AdapterConstructor = Callable[[VectorDBConfig], VectorDBAdapter]


def _create_memory(config: VectorDBConfig) -> VectorDBAdapter:
    from ragindex_sdk.vector.memory_adapter import MemoryVectorAdapter
    return MemoryVectorAdapter(config)


def _create_sqlite(config: VectorDBConfig) -> VectorDBAdapter:
    from ragindex_sdk.vector.sqlite_adapter import SQLiteVectorAdapter
    return SQLiteVectorAdapter(config)


def _create_pinecone(config: VectorDBConfig) -> VectorDBAdapter:
    from ragindex_sdk.vector.pinecone_adapter import PineconeVectorAdapter
    return PineconeVectorAdapter(config)


BUILTIN_PROVIDERS: Dict[str, AdapterConstructor] = {
    "memory": _create_memory,
    "sqlite": _create_sqlite,
    "pinecone": _create_pinecone,
}


class AdapterRegistry:
    """
    Registry of adapter constructors keyed by provider name.

    Example:
        registry = AdapterRegistry()
        registry.register("custom", lambda cfg: MyAdapter(cfg))
        adapter = registry.create(VectorDBConfig(provider="custom"))
    """

    def __init__(self, *, include_builtins: bool = True) -> None:
        self._constructors: Dict[str, AdapterConstructor] = {}
        self._include_builtins = include_builtins
        self._builtins_loaded = False

    def _ensure_builtins(self) -> None:
        if self._builtins_loaded:
            return
        self._builtins_loaded = True
        if not self._include_builtins:
            return
        for name, ctor in BUILTIN_PROVIDERS.items():
            self._constructors.setdefault(name, ctor)

    def register(
        self,
        provider: str,
        constructor: AdapterConstructor,
        *,
        replace: bool = False,
    ) -> None:
        """Register `constructor` under `provider`; duplicates need replace=True."""
        if not isinstance(provider, str) or not provider:
            raise ConfigurationError("provider must be a non-empty string")
        if not callable(constructor):
            raise ConfigurationError(f"constructor for provider '{provider}' is not callable")
        self._ensure_builtins()
        if provider in self._constructors and not replace:
            raise ConfigurationError(
                f"Adapter already registered for provider: {provider}",
                details={"provider": provider},
            )
        self._constructors[provider] = constructor
        LOG.debug("Registered vector adapter provider %s", provider)

    def get(self, provider: str) -> Optional[AdapterConstructor]:
        self._ensure_builtins()
        return self._constructors.get(provider)

    def create(self, config: Any) -> VectorDBAdapter:
        """Construct (but do not initialize) an adapter for `config`."""
        cfg = VectorDBConfig.coerce(config) or VectorDBConfig()
        constructor = self.get(cfg.provider)
        if constructor is None:
            raise ConfigurationError(
                f"No adapter registered for provider: {cfg.provider}",
                details={"provider": cfg.provider, "available": self.list_providers()},
            )
        return constructor(cfg)

    def list_providers(self) -> List[str]:
        self._ensure_builtins()
        return list(self._constructors)

    def has_provider(self, provider: str) -> bool:
        self._ensure_builtins()
        return provider in self._constructors

    def unregister(self, provider: str) -> bool:
        self._ensure_builtins()
        return self._constructors.pop(provider, None) is not None

    def clear(self) -> None:
        """Forget every provider; built-ins come back on next use."""
        self._constructors.clear()
        self._builtins_loaded = False


default_registry = AdapterRegistry()


__all__ = [
    "AdapterConstructor",
    "AdapterRegistry",
    "BUILTIN_PROVIDERS",
    "default_registry",
]
