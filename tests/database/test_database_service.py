# SPDX-License-Identifier: Apache-2.0
"""
DatabaseService facade: lifecycle, convenience writes and statistics.
"""

import re
import uuid

import pytest
import pytest_asyncio

from ragindex_sdk.database import DatabaseService, DatabaseStats
from ragindex_sdk.vector import NotInitialized, ValidationError
from tests.conftest import DIMENSION

pytestmark = pytest.mark.asyncio

E1 = [1.0, 0.0, 0.0, 0.0]
E2 = [0.0, 1.0, 0.0, 0.0]

ISO_MILLIS_Z = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


@pytest_asyncio.fixture
async def service(provider):
    svc = DatabaseService()
    await svc.initialize({"provider": provider, "options": {"dimension": DIMENSION}})
    try:
        yield svc
    finally:
        await svc.close()


async def test_operations_before_initialize_raise():
    svc = DatabaseService()

    assert not svc.is_initialized
    assert svc.get_adapter_info() is None
    with pytest.raises(NotInitialized, match="Database service not initialized"):
        await svc.save_item("x", E1)
    with pytest.raises(NotInitialized):
        await svc.get_stats()


async def test_close_without_initialize_is_safe():
    svc = DatabaseService()

    await svc.close()
    await svc.close()

    assert not svc.is_initialized


async def test_initialize_twice_keeps_the_first_adapter(service, provider):
    first = service.adapter

    await service.initialize({"provider": provider, "options": {"dimension": 8}})

    assert service.adapter is first
    assert service.get_adapter_info().provider == provider


async def test_close_releases_adapter(provider):
    svc = DatabaseService()
    await svc.initialize({"provider": provider, "options": {"dimension": DIMENSION}})
    adapter = svc.adapter

    await svc.close()
    await svc.close()

    assert adapter.is_closed
    assert not svc.is_initialized


async def test_save_item_stamps_id_and_created_at(service):
    doc_id = await service.save_item("hello", E1, {"sourceType": "web"})

    uuid.UUID(doc_id)
    stored = await service.adapter.get(doc_id)
    assert stored.content == "hello"
    assert stored.metadata["sourceType"] == "web"
    assert ISO_MILLIS_Z.match(stored.metadata["createdAt"])


async def test_save_item_does_not_mutate_caller_metadata(service):
    metadata = {"sourceType": "web"}

    await service.save_item("hello", E1, metadata)

    assert metadata == {"sourceType": "web"}


async def test_save_items_returns_ids_in_order(service):
    ids = await service.save_items([
        {"content": "one", "embedding": E1, "metadata": {"n": 1}},
        {"content": "two", "embedding": E2},
    ])

    assert len(ids) == 2
    assert (await service.adapter.get(ids[0])).content == "one"
    assert (await service.adapter.get(ids[1])).content == "two"
    assert await service.count_items() == 2


async def test_save_items_rejects_malformed_items(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.save_items([{"content": "ok", "embedding": E1}, {"content": "no vector"}])

    assert exc_info.value.details["index"] == 1
    assert await service.count_items() == 0


async def test_search_items_filters_by_source_type(service):
    await service.save_item("web page", E1, {"sourceType": "web"})
    await service.save_item("pdf page", [0.9, 0.1, 0.0, 0.0], {"sourceType": "pdf"})

    everything = await service.search_items(E1, k=5)
    only_pdf = await service.search_items(E1, k=5, source_type="pdf")

    assert [r.content for r in everything] == ["web page", "pdf page"]
    assert [r.content for r in only_pdf] == ["pdf page"]


async def test_stats_on_empty_store(service):
    stats = await service.get_stats()

    assert stats == DatabaseStats(total_items=0, by_source_type={})
    assert stats.asdict() == {"totalItems": 0, "bySourceType": {}}


async def test_stats_group_by_source_type(service):
    await service.save_items([
        {"content": "a", "embedding": E1, "metadata": {"sourceType": "web"}},
        {"content": "b", "embedding": E2, "metadata": {"sourceType": "web"}},
        {"content": "c", "embedding": E1, "metadata": {"sourceType": "pdf"}},
        {"content": "d", "embedding": E2},
    ])

    stats = await service.get_stats()

    assert stats.total_items == 4
    assert stats.by_source_type == {"web": 2, "pdf": 1, "unknown": 1}


async def test_stats_scan_crosses_page_boundaries(service):
    await service.save_items(
        [{"content": f"item {i}", "embedding": E1, "metadata": {"sourceType": "bulk"}} for i in range(105)]
    )

    stats = await service.get_stats()

    assert stats.asdict() == {"totalItems": 105, "bySourceType": {"bulk": 105}}


async def test_list_items_pages_are_stable(service):
    ids = await service.save_items(
        [{"content": f"item {i}", "embedding": E1} for i in range(15)]
    )

    first = await service.list_items(limit=10)
    second = await service.list_items(limit=10, offset=10)

    assert [d.id for d in first] + [d.id for d in second] == ids
    assert [d.id for d in await service.list_items(limit=10)] == [d.id for d in first]


async def test_count_items_with_filter(service):
    await service.save_item("a", E1, {"sourceType": "web"})
    await service.save_item("b", E2, {"sourceType": "pdf"})

    assert await service.count_items({"sourceType": "web"}) == 1


async def test_async_context_manager_uses_factory_default():
    async with DatabaseService() as svc:
        info = svc.get_adapter_info()
        assert info.provider == "memory"
        adapter = svc.adapter

    assert adapter.is_closed


async def test_stats_labels_non_string_source_types_as_json(service):
    await service.save_items([
        {"content": "a", "embedding": E1, "metadata": {"sourceType": True}},
        {"content": "b", "embedding": E1, "metadata": {"sourceType": 2}},
        {"content": "c", "embedding": E2, "metadata": {"sourceType": "web"}},
        {"content": "d", "embedding": E2, "metadata": {"sourceType": None}},
    ])

    stats = await service.get_stats()

    assert stats.by_source_type == {"true": 1, "2": 1, "web": 1, "unknown": 1}
