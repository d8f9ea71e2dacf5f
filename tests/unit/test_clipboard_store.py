"""Unit tests for ClipboardStore: tenancy, coercion, pagination, search, mutation."""

from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio

from cliplink.errors import InvalidInputError, NotFoundError, StorageUnavailableError
from cliplink.sync import ChannelRegistry, ClipboardStore, ContentType, DeviceType, ItemFilter, ItemPatch, NewItem


async def _save(store: ClipboardStore, channel_id: str, content: str, **fields: str) -> str:
    item = await store.save(channel_id, NewItem(content=content, **fields))
    return item.id


@pytest_asyncio.fixture
async def two_channels(registry: ChannelRegistry) -> tuple[str, str]:
    first = await registry.create("C1")
    second = await registry.create("C2")
    return first.id, second.id


@pytest.mark.asyncio
async def test_save_sets_timestamps_and_defaults(store: ClipboardStore, channel_id: str) -> None:
    item = await store.save(channel_id, NewItem(content="hello"))
    assert item.channel_id == channel_id
    assert item.type is ContentType.TEXT
    assert item.device_type is DeviceType.OTHER
    assert item.favorite is False
    assert item.created_at == item.updated_at


@pytest.mark.asyncio
async def test_save_coerces_unknown_types(store: ClipboardStore, channel_id: str) -> None:
    item = await store.save(channel_id, NewItem(content="x", type="bogus", device_type="bogus"))
    assert item.type is ContentType.TEXT
    assert item.device_type is DeviceType.OTHER


@pytest.mark.asyncio
async def test_save_rejects_empty_content(store: ClipboardStore, channel_id: str) -> None:
    with pytest.raises(InvalidInputError):
        await store.save(channel_id, NewItem(content=""))


@pytest.mark.asyncio
async def test_empty_channel_id_is_rejected(store: ClipboardStore) -> None:
    with pytest.raises(InvalidInputError):
        await store.count("")
    with pytest.raises(InvalidInputError):
        await store.get_latest("   ")


@pytest.mark.asyncio
async def test_items_are_invisible_across_channels(store: ClipboardStore, two_channels: tuple[str, str]) -> None:
    c1, c2 = two_channels
    item_id = await _save(store, c1, "secret")
    with pytest.raises(NotFoundError):
        await store.get_by_id(item_id, c2)
    with pytest.raises(NotFoundError):
        await store.delete(item_id, c2)
    with pytest.raises(NotFoundError):
        await store.toggle_favorite(item_id, c2)
    assert (await store.list_paginated(c2)).total == 0
    assert (await store.search("secret", c2)).total == 0
    assert await store.count(c2) == 0
    assert (await store.get_by_id(item_id, c1)).content == "secret"


@pytest.mark.asyncio
async def test_get_latest_is_newest_first_and_capped(store: ClipboardStore, channel_id: str) -> None:
    for n in range(5):
        await _save(store, channel_id, f"item {n}")
    latest = await store.get_latest(channel_id, 3)
    assert [i.content for i in latest] == ["item 4", "item 3", "item 2"]


@pytest.mark.asyncio
async def test_get_latest_on_empty_channel_returns_nothing(store: ClipboardStore, channel_id: str) -> None:
    assert await store.get_latest(channel_id, 5) == []


@pytest.mark.asyncio
async def test_pagination_is_complete(store: ClipboardStore, channel_id: str) -> None:
    for n in range(25):
        await _save(store, channel_id, f"item {n}")
    pages = [await store.list_paginated(channel_id, page, 10) for page in (1, 2, 3)]
    assert [len(p.items) for p in pages] == [10, 10, 5]
    assert all(p.total == 25 and p.total_pages == 3 for p in pages)
    seen = [item.id for p in pages for item in p.items]
    assert len(set(seen)) == 25


@pytest.mark.asyncio
async def test_pagination_normalizes_page_and_size(store: ClipboardStore, channel_id: str) -> None:
    await _save(store, channel_id, "one")
    page = await store.list_paginated(channel_id, 0, 0)
    assert page.page == 1
    assert page.size == 20
    big = await store.list_paginated(channel_id, 1, 500)
    assert big.size == 100


@pytest.mark.asyncio
async def test_pagination_stays_newest_first_with_interleaved_inserts(
    store: ClipboardStore, channel_id: str
) -> None:
    for n in range(6):
        await _save(store, channel_id, f"old {n}")
    first = await store.list_paginated(channel_id, 1, 3)
    await _save(store, channel_id, "new")
    second = await store.list_paginated(channel_id, 2, 3)
    for page in (first, second):
        stamps = [item.created_at for item in page.items]
        assert stamps == sorted(stamps, reverse=True)


@pytest.mark.asyncio
async def test_list_by_filter_ignores_invalid_values(store: ClipboardStore, channel_id: str) -> None:
    await _save(store, channel_id, "a", type="link", device_type="phone")
    await _save(store, channel_id, "b", type="code", device_type="desktop")
    links = await store.list_by_filter(channel_id, ItemFilter(type="link"))
    assert [i.content for i in links.items] == ["a"]
    unfiltered = await store.list_by_filter(channel_id, ItemFilter(type="bogus", device_type="bogus"))
    assert unfiltered.total == 2
    both = await store.list_by_filter(channel_id, ItemFilter(type="code", device_type="desktop"))
    assert [i.content for i in both.items] == ["b"]


@pytest.mark.asyncio
async def test_single_filter_variants_reject_unknown_values(store: ClipboardStore, channel_id: str) -> None:
    await _save(store, channel_id, "a", type="link", device_type="phone")
    assert (await store.list_by_type(channel_id, "link")).total == 1
    assert (await store.list_by_device_type(channel_id, "phone")).total == 1
    with pytest.raises(InvalidInputError):
        await store.list_by_type(channel_id, "bogus")
    with pytest.raises(InvalidInputError):
        await store.list_by_device_type(channel_id, "bogus")


@pytest.mark.asyncio
async def test_search_blank_keyword_returns_empty_page(store: ClipboardStore, channel_id: str) -> None:
    await _save(store, channel_id, "anything")
    page = await store.search("   ", channel_id)
    assert page.items == []
    assert page.total == 0
    assert page.total_pages == 0


@pytest.mark.asyncio
async def test_search_is_case_insensitive_and_ranks_title_matches_first(
    store: ClipboardStore, channel_id: str
) -> None:
    await _save(store, channel_id, "title hit", title="Meeting NOTES")
    await _save(store, channel_id, "these notes are in the body")
    await _save(store, channel_id, "unrelated")
    page = await store.search("notes", channel_id)
    assert page.total == 2
    assert [i.content for i in page.items] == ["title hit", "these notes are in the body"]


@pytest.mark.asyncio
async def test_search_treats_like_wildcards_literally(store: ClipboardStore, channel_id: str) -> None:
    await _save(store, channel_id, "100% done")
    await _save(store, channel_id, "100 items")
    await _save(store, channel_id, "snake_case")
    await _save(store, channel_id, "snakeXcase")
    assert [i.content for i in (await store.search("100%", channel_id)).items] == ["100% done"]
    assert [i.content for i in (await store.search("e_c", channel_id)).items] == ["snake_case"]


@pytest.mark.asyncio
async def test_update_preserves_unspecified_fields(store: ClipboardStore, channel_id: str) -> None:
    original = await store.save(channel_id, NewItem(content="body", title="T", type="code", device_id="D1"))
    updated = await store.update(original.id, channel_id, ItemPatch(title="New", content=""))
    assert updated.title == "New"
    assert updated.content == "body"
    assert updated.type is ContentType.CODE
    assert updated.device_id == "D1"
    assert updated.updated_at >= original.updated_at


@pytest.mark.asyncio
async def test_update_can_clear_title_explicitly(store: ClipboardStore, channel_id: str) -> None:
    original = await store.save(channel_id, NewItem(content="body", title="T"))
    cleared = await store.update(original.id, channel_id, ItemPatch(clear_title=True))
    assert cleared.title == ""


@pytest.mark.asyncio
async def test_update_coerces_type_and_missing_item_raises(store: ClipboardStore, channel_id: str) -> None:
    original = await store.save(channel_id, NewItem(content="body"))
    updated = await store.update(original.id, channel_id, ItemPatch(type="bogus", device_type="nope"))
    assert updated.type is ContentType.TEXT
    assert updated.device_type is DeviceType.OTHER
    with pytest.raises(NotFoundError):
        await store.update("missing", channel_id, ItemPatch(content="x"))


@pytest.mark.asyncio
async def test_toggle_favorite_flip_and_explicit(store: ClipboardStore, channel_id: str) -> None:
    item_id = await _save(store, channel_id, "fav")
    assert (await store.toggle_favorite(item_id, channel_id)).favorite is True
    assert (await store.toggle_favorite(item_id, channel_id)).favorite is False
    assert (await store.toggle_favorite(item_id, channel_id, True)).favorite is True
    assert (await store.toggle_favorite(item_id, channel_id, True)).favorite is True
    with pytest.raises(NotFoundError):
        await store.toggle_favorite("missing", channel_id)


@pytest.mark.asyncio
async def test_list_favorites_orders_by_update_time(store: ClipboardStore, channel_id: str) -> None:
    first = await _save(store, channel_id, "first")
    second = await _save(store, channel_id, "second")
    await _save(store, channel_id, "plain")
    await store.toggle_favorite(second, channel_id, True)
    await store.toggle_favorite(first, channel_id, True)
    favorites = await store.list_favorites(channel_id)
    assert [i.content for i in favorites] == ["first", "second"]
    assert len(await store.list_favorites(channel_id, 1)) == 1


@pytest.mark.asyncio
async def test_delete_removes_item(store: ClipboardStore, channel_id: str) -> None:
    item_id = await _save(store, channel_id, "gone")
    await store.delete(item_id, channel_id)
    with pytest.raises(NotFoundError):
        await store.get_by_id(item_id, channel_id)
    with pytest.raises(NotFoundError):
        await store.delete(item_id, channel_id)


@pytest.mark.asyncio
async def test_counts(store: ClipboardStore, channel_id: str) -> None:
    await _save(store, channel_id, "a", type="link")
    await _save(store, channel_id, "b", type="link")
    await _save(store, channel_id, "c", type="code")
    assert await store.count(channel_id) == 3
    assert await store.count_by_type("link", channel_id) == 2
    by_type = await store.count_by_types(channel_id)
    assert by_type["link"] == 2
    assert by_type["code"] == 1
    assert by_type["image"] == 0


@pytest.mark.asyncio
async def test_concurrent_saves_are_all_stored(store: ClipboardStore, channel_id: str) -> None:
    await asyncio.gather(*(_save(store, channel_id, f"burst {n}") for n in range(5)))
    assert await store.count(channel_id) == 5


@pytest.mark.asyncio
async def test_save_into_unknown_channel_is_rejected(store: ClipboardStore) -> None:
    with pytest.raises(StorageUnavailableError):
        await store.save("ghost", NewItem(content="x"))


@pytest.mark.asyncio
async def test_search_folds_ascii_case_and_matches_accented_text_as_written(
    store: ClipboardStore, channel_id: str
) -> None:
    await _save(store, channel_id, "Notes from École Normale")
    assert (await store.search("COLE NORMALE", channel_id)).total == 1
    assert (await store.search("École", channel_id)).total == 1
