"""Unit tests for DeviceDirectory."""

from __future__ import annotations

import pytest

from cliplink.errors import InvalidInputError, NotFoundError, StorageUnavailableError
from cliplink.sync import ChannelRegistry, DeviceDirectory, DeviceType


@pytest.mark.asyncio
async def test_register_creates_online_device(directory: DeviceDirectory) -> None:
    device = await directory.register("Phone", "phone", "D1")
    assert device.id == "D1"
    assert device.type is DeviceType.PHONE
    assert device.is_online is True


@pytest.mark.asyncio
async def test_register_coerces_unknown_type(directory: DeviceDirectory) -> None:
    device = await directory.register("Toaster", "bogus", "D2")
    assert device.type is DeviceType.OTHER


@pytest.mark.asyncio
async def test_register_generates_id_when_missing(directory: DeviceDirectory) -> None:
    device = await directory.register("Laptop", "desktop")
    assert device.id


@pytest.mark.asyncio
async def test_register_rejects_empty_name(directory: DeviceDirectory) -> None:
    with pytest.raises(InvalidInputError):
        await directory.register("  ", "phone", "D1")


@pytest.mark.asyncio
async def test_register_existing_updates_and_sets_online(directory: DeviceDirectory) -> None:
    await directory.register("Phone", "phone", "D1")
    await directory.update_presence("D1", False)
    updated = await directory.register("Tablet", "tablet", "D1")
    assert updated.name == "Tablet"
    assert updated.type is DeviceType.TABLET
    assert updated.is_online is True


@pytest.mark.asyncio
async def test_add_to_channel_is_idempotent(directory: DeviceDirectory, channel_id: str) -> None:
    await directory.register("Phone", "phone", "D1")
    first = await directory.add_to_channel("D1", channel_id)
    await directory.update_in_channel("D1", channel_id, False)
    second = await directory.add_to_channel("D1", channel_id)
    assert second.is_active is True
    assert second.joined_at == first.joined_at
    assert await directory.count_total(channel_id) == 1


@pytest.mark.asyncio
async def test_membership_is_per_channel(
    directory: DeviceDirectory, registry: ChannelRegistry, channel_id: str
) -> None:
    other = await registry.create("C2")
    await directory.register("Phone", "phone", "D1")
    await directory.add_to_channel("D1", channel_id)
    await directory.add_to_channel("D1", other.id)
    await directory.remove_from_channel("D1", channel_id)
    assert await directory.is_member("D1", channel_id) is False
    assert await directory.is_member("D1", other.id) is True
    assert (await directory.get("D1")).name == "Phone"


@pytest.mark.asyncio
async def test_remove_from_channel_without_membership_raises(directory: DeviceDirectory, channel_id: str) -> None:
    await directory.register("Phone", "phone", "D1")
    with pytest.raises(NotFoundError):
        await directory.remove_from_channel("D1", channel_id)


@pytest.mark.asyncio
async def test_update_presence_unknown_device_raises(directory: DeviceDirectory) -> None:
    with pytest.raises(NotFoundError):
        await directory.update_presence("ghost", True)


@pytest.mark.asyncio
async def test_update_in_channel_does_not_touch_global_presence(
    directory: DeviceDirectory, channel_id: str
) -> None:
    await directory.register("Phone", "phone", "D1")
    await directory.add_to_channel("D1", channel_id)
    view = await directory.update_in_channel("D1", channel_id, False)
    assert view.is_active is False
    assert view.is_online is True


@pytest.mark.asyncio
async def test_update_in_channel_without_membership_raises(directory: DeviceDirectory, channel_id: str) -> None:
    await directory.register("Phone", "phone", "D1")
    with pytest.raises(NotFoundError):
        await directory.update_in_channel("D1", channel_id, True)


@pytest.mark.asyncio
async def test_counts_only_include_channel_members(
    directory: DeviceDirectory, registry: ChannelRegistry, channel_id: str
) -> None:
    other = await registry.create("C2")
    for device_id in ("D1", "D2", "D3"):
        await directory.register(device_id.lower(), "desktop", device_id)
    await directory.add_to_channel("D1", channel_id)
    await directory.add_to_channel("D2", channel_id)
    await directory.add_to_channel("D3", other.id)
    await directory.update_presence("D2", False)
    assert await directory.count_total(channel_id) == 2
    assert await directory.count_online(channel_id) == 1


@pytest.mark.asyncio
async def test_list_by_channel_orders_most_recently_seen_first(
    directory: DeviceDirectory, channel_id: str
) -> None:
    for device_id in ("D1", "D2"):
        await directory.register(device_id, "phone", device_id)
        await directory.add_to_channel(device_id, channel_id)
    await directory.update_in_channel("D1", channel_id, True)
    views = await directory.list_by_channel(channel_id)
    assert [v.id for v in views] == ["D1", "D2"]
    assert all(v.channel_id == channel_id for v in views)


@pytest.mark.asyncio
async def test_rename_changes_name_and_type(directory: DeviceDirectory) -> None:
    await directory.register("Phone", "phone", "D1")
    renamed = await directory.rename("D1", "Work phone", "tablet")
    assert renamed.name == "Work phone"
    assert renamed.type is DeviceType.TABLET


@pytest.mark.asyncio
async def test_remove_deletes_device_and_memberships(directory: DeviceDirectory, channel_id: str) -> None:
    await directory.register("Phone", "phone", "D1")
    await directory.add_to_channel("D1", channel_id)
    await directory.remove("D1")
    assert await directory.count_total(channel_id) == 0
    with pytest.raises(NotFoundError):
        await directory.get("D1")


@pytest.mark.asyncio
async def test_add_to_unknown_channel_is_rejected(directory: DeviceDirectory) -> None:
    await directory.register("Phone", "phone", "D1")
    with pytest.raises(StorageUnavailableError):
        await directory.add_to_channel("D1", "ghost")
    assert await directory.count_total("ghost") == 0
