# ragindex_sdk/database/operations.py
# SPDX-License-Identifier: Apache-2.0
"""
Scoped database access: initialize → run → always close.

Each scope builds its own registry, factory and DatabaseService, so nothing
is shared between scopes and custom adapters never leak into the process-wide
default registry.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, Optional, TypeVar

from ragindex_sdk.database.service import DatabaseService
from ragindex_sdk.vector.factory import AdapterFactory
from ragindex_sdk.vector.registry import AdapterConstructor, AdapterRegistry

LOG = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[DatabaseService], Awaitable[T]]


def _build_service(custom_adapters: Optional[Mapping[str, AdapterConstructor]]) -> DatabaseService:
    registry = AdapterRegistry()
    for provider, constructor in (custom_adapters or {}).items():
        registry.register(provider, constructor, replace=True)
    return DatabaseService(AdapterFactory(registry=registry))


@asynccontextmanager
async def database_session(
    config: Any = None,
    custom_adapters: Optional[Mapping[str, AdapterConstructor]] = None,
) -> AsyncIterator[DatabaseService]:
    """
    Yield an initialized DatabaseService and close it on exit.

    Example:
        async with database_session({"provider": "memory"}) as db:
            await db.save_item("hello", embedding)
    """
    service = _build_service(custom_adapters)
    try:
        await service.initialize(config)
        yield service
    finally:
        await service.close()
        LOG.debug("Database session closed")


class DatabaseOperations:
    """
    Run callables against a freshly initialized DatabaseService.

    The service is closed when the callable returns or raises; the
    callable's exception propagates unchanged.
    """

    def __init__(
        self,
        config: Any = None,
        custom_adapters: Optional[Mapping[str, AdapterConstructor]] = None,
    ) -> None:
        self._config = config
        self._custom_adapters = dict(custom_adapters or {})

    async def with_database(self, operation: Operation[T]) -> T:
        async with database_session(self._config, self._custom_adapters) as service:
            return await operation(service)

    async def with_read_only(self, query: Operation[T]) -> T:
        # Same connection handling as with_database; kept separate for call-site intent.
        return await self.with_database(query)

    async def with_transaction(self, operations: Operation[T]) -> T:
        """
        Run several operations in one scope.

        This is a scope, not a database transaction: writes that succeeded
        before a failure stay applied.
        """
        return await self.with_database(operations)


__all__ = [
    "DatabaseOperations",
    "database_session",
]
