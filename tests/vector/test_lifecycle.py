# SPDX-License-Identifier: Apache-2.0
"""
Vector storage - initialize / close lifecycle.
"""

import pytest

from ragindex_sdk.vector import ClosedError, NotInitialized

pytestmark = pytest.mark.asyncio


async def test_operations_before_initialize_raise_not_initialized(make_adapter, make_doc):
    adapter = make_adapter()

    with pytest.raises(NotInitialized):
        await adapter.insert(make_doc("a"))
    with pytest.raises(NotInitialized):
        await adapter.search([1.0, 0.0, 0.0, 0.0])
    with pytest.raises(NotInitialized) as exc_info:
        await adapter.count()

    assert exc_info.value.code == "NOT_INITIALIZED"
    assert exc_info.value.details["op"] == "count"


async def test_initialize_twice_is_a_noop(make_adapter, make_doc):
    adapter = make_adapter()
    await adapter.initialize()
    await adapter.insert(make_doc("kept"))

    await adapter.initialize()

    assert await adapter.get("kept") is not None
    await adapter.close()


async def test_operations_after_close_raise_closed_error(make_adapter, make_doc):
    adapter = make_adapter()
    await adapter.initialize()
    await adapter.close()

    assert adapter.is_closed
    with pytest.raises(ClosedError):
        await adapter.insert(make_doc("a"))
    with pytest.raises(ClosedError):
        await adapter.list()
    with pytest.raises(ClosedError):
        await adapter.initialize()


async def test_close_twice_is_a_noop(make_adapter):
    adapter = make_adapter()
    await adapter.initialize()

    await adapter.close()
    await adapter.close()

    assert adapter.is_closed


async def test_async_context_manager_initializes_and_closes(make_adapter, make_doc):
    adapter = make_adapter()

    async with adapter as active:
        assert active is adapter
        assert adapter.is_initialized
        await adapter.insert(make_doc("a"))
        assert await adapter.count() == 1

    assert adapter.is_closed


async def test_get_info_is_available_without_initialize(make_adapter, provider):
    assert make_adapter().get_info().provider == provider
