# SPDX-License-Identifier: Apache-2.0
"""
Vector storage - listing, paging and counting.
"""

import pytest

from ragindex_sdk.vector import CAP_GROUPED_COUNT, NotSupported, ValidationError

pytestmark = pytest.mark.asyncio


async def _seed(adapter, make_doc, n):
    docs = [
        make_doc(f"item-{i:02d}", embedding=[1.0, float(i), 0.0, 0.0], index=i)
        for i in range(n)
    ]
    await adapter.insert_batch(docs)
    return docs


async def test_list_returns_documents_in_insertion_order(adapter, make_doc):
    docs = await _seed(adapter, make_doc, 5)

    listed = await adapter.list()

    assert [d.id for d in listed] == [d.id for d in docs]
    assert listed == docs


async def test_list_pages_are_stable_and_complete(adapter, make_doc):
    docs = await _seed(adapter, make_doc, 15)

    first = await adapter.list(limit=10, offset=0)
    second = await adapter.list(limit=10, offset=10)

    assert len(first) == 10
    assert len(second) == 5
    assert [d.id for d in first + second] == [d.id for d in docs]
    assert await adapter.list(limit=10, offset=0) == first


async def test_list_default_limit_is_one_hundred(adapter, make_doc):
    await adapter.insert_batch(
        [make_doc(f"x{i:03d}", embedding=[1.0, 0.0, float(i), 0.0]) for i in range(105)]
    )

    assert len(await adapter.list()) == 100
    assert len(await adapter.list(offset=100)) == 5


async def test_list_with_zero_limit_or_past_end_is_empty(adapter, make_doc):
    await _seed(adapter, make_doc, 3)

    assert await adapter.list(limit=0) == []
    assert await adapter.list(offset=3) == []


@pytest.mark.parametrize("kwargs", [{"limit": -1}, {"offset": -5}, {"limit": "10"}])
async def test_list_rejects_invalid_paging(adapter, kwargs):
    with pytest.raises(ValidationError):
        await adapter.list(**kwargs)


async def test_list_and_count_apply_filters(adapter, make_doc):
    await adapter.insert_batch([
        make_doc("w1", sourceType="web"),
        make_doc("p1", sourceType="pdf"),
        make_doc("w2", sourceType="web"),
        make_doc("n1"),
    ])

    assert [d.id for d in await adapter.list(filter={"sourceType": "web"})] == ["w1", "w2"]
    assert await adapter.count({"sourceType": "web"}) == 2
    assert await adapter.count({"sourceType": "gist"}) == 0
    assert await adapter.count() == 4


async def test_count_matches_filter_on_numbers_and_booleans(adapter, make_doc):
    await adapter.insert_batch([
        make_doc("a", chunkIndex=0, draft=True),
        make_doc("b", chunkIndex=1, draft=False),
        make_doc("c", chunkIndex=0, draft=False),
    ])

    assert await adapter.count({"chunkIndex": 0}) == 2
    assert await adapter.count({"draft": False}) == 2
    assert await adapter.count({"chunkIndex": 0, "draft": True}) == 1


async def test_count_by_groups_or_is_not_supported(adapter, make_doc):
    await adapter.insert_batch([
        make_doc("w1", sourceType="web"),
        make_doc("w2", sourceType="web"),
        make_doc("p1", sourceType="pdf"),
        make_doc("n1"),
    ])

    if adapter.get_info().supports(CAP_GROUPED_COUNT):
        assert await adapter.count_by("sourceType") == {"web": 2, "pdf": 1, "unknown": 1}
        assert await adapter.count_by("sourceType", filter={"sourceType": "web"}) == {"web": 2}
    else:
        with pytest.raises(NotSupported):
            await adapter.count_by("sourceType")


async def test_boolean_and_numeric_filters_never_cross_match(adapter, make_doc):
    await adapter.insert_batch([
        make_doc("one", flag=1),
        make_doc("yes", flag=True),
        make_doc("zero", flag=0),
        make_doc("no", flag=False),
    ])

    assert await adapter.count({"flag": True}) == 1
    assert await adapter.count({"flag": 1}) == 1
    assert await adapter.count({"flag": False}) == 1
    assert await adapter.count({"flag": 0}) == 1
    assert [d.id for d in await adapter.list(filter={"flag": True})] == ["yes"]
    assert [r.id for r in await adapter.search([1.0, 0.0, 0.0, 0.0], filter={"flag": 1})] == ["one"]
