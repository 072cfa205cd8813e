# ragindex_sdk/vector/factory.py
# SPDX-License-Identifier: Apache-2.0
"""
Adapter factory: merges defaults, constructs through a registry, initializes,
and optionally caches one instance per distinct configuration.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

from ragindex_sdk.vector.config import DEFAULT_DIMENSION, DEFAULT_PROVIDER, VectorDBConfig
from ragindex_sdk.vector.registry import AdapterRegistry, default_registry
from ragindex_sdk.vector.vector_base import VectorDBAdapter

LOG = logging.getLogger(__name__)


class AdapterFactory:
    """
    Creates initialized adapters.

    Singletons are keyed by the fully merged configuration, so two calls
    that resolve to the same provider and options share one adapter.
    """

    def __init__(
        self,
        registry: Optional[AdapterRegistry] = None,
        default_config: Optional[VectorDBConfig] = None,
    ) -> None:
        self._registry = registry or default_registry
        self._default_config = default_config or VectorDBConfig(
            provider=DEFAULT_PROVIDER,
            options={"dimension": DEFAULT_DIMENSION},
        )
        self._instances: Dict[str, VectorDBAdapter] = {}

    @property
    def registry(self) -> AdapterRegistry:
        return self._registry

    def set_default_config(self, config: Any) -> None:
        self._default_config = VectorDBConfig.coerce(config) or VectorDBConfig()

    def get_default_config(self) -> VectorDBConfig:
        return self._default_config.merged(None)

    async def create(self, config: Any = None, *, singleton: bool = False) -> VectorDBAdapter:
        """Build and initialize an adapter for `config` layered over the defaults."""
        if isinstance(config, Mapping) and "provider" not in config:
            # Partial config: keep the default provider.
            config = {**config, "provider": self._default_config.provider}
        final = self._default_config.merged(VectorDBConfig.coerce(config))
        key = final.cache_key()

        if singleton:
            existing = self._instances.get(key)
            if existing is not None:
                return existing

        adapter = self._registry.create(final)
        try:
            await adapter.initialize()
        except Exception:
            try:
                await adapter.close()
            except Exception:
                LOG.warning("Closing %s adapter after failed initialize also failed", final.provider, exc_info=True)
            raise
        LOG.debug("Created %s adapter", final.provider)

        if singleton:
            self._instances[key] = adapter
        return adapter

    async def create_from_env(
        self,
        environ: Optional[Mapping[str, str]] = None,
        *,
        singleton: bool = False,
    ) -> VectorDBAdapter:
        """Create an adapter from VECTOR_DB_* environment variables."""
        return await self.create(VectorDBConfig.from_env(environ), singleton=singleton)

    def clear_instances(self) -> None:
        """Forget cached singletons without closing them."""
        self._instances.clear()

    async def close_all(self) -> None:
        """Close every cached singleton, then forget them."""
        adapters = list(self._instances.values())
        try:
            await asyncio.gather(*(a.close() for a in adapters))
        finally:
            self._instances.clear()


default_factory = AdapterFactory()


__all__ = [
    "AdapterFactory",
    "default_factory",
]
