"""Unit tests for ChannelRegistry."""

from __future__ import annotations

import asyncio
import string

import pytest

from cliplink.errors import InvalidInputError, NotFoundError
from cliplink.sync import ChannelRegistry


@pytest.mark.asyncio
async def test_create_without_id_generates_hex_id(registry: ChannelRegistry) -> None:
    channel = await registry.create()
    assert len(channel.id) == 32
    assert set(channel.id) <= set(string.hexdigits.lower())
    assert await registry.exists(channel.id) is True


@pytest.mark.asyncio
async def test_generated_ids_are_distinct(registry: ChannelRegistry) -> None:
    first = await registry.create("")
    second = await registry.create(None)
    assert first.id != second.id


@pytest.mark.asyncio
async def test_create_existing_id_returns_existing_channel(registry: ChannelRegistry) -> None:
    created = await registry.create("team", name="Team")
    again = await registry.create("team", name="Other")
    assert again.id == "team"
    assert again.name == "Team"
    assert again.created_at == created.created_at


@pytest.mark.asyncio
async def test_get_or_create_reports_created_flag(registry: ChannelRegistry) -> None:
    _, created = await registry.get_or_create("flag")
    _, created_again = await registry.get_or_create("flag")
    assert created is True
    assert created_again is False


@pytest.mark.asyncio
async def test_create_rejects_overlong_id(registry: ChannelRegistry) -> None:
    with pytest.raises(InvalidInputError):
        await registry.create("x" * 65)


@pytest.mark.asyncio
async def test_create_accepts_id_at_length_limit(registry: ChannelRegistry) -> None:
    channel = await registry.create("y" * 64)
    assert channel.id == "y" * 64


@pytest.mark.asyncio
async def test_exists_is_false_for_unknown_and_empty(registry: ChannelRegistry) -> None:
    assert await registry.exists("missing") is False
    assert await registry.exists("") is False
    assert await registry.exists(None) is False


@pytest.mark.asyncio
async def test_get_unknown_raises_not_found(registry: ChannelRegistry) -> None:
    with pytest.raises(NotFoundError):
        await registry.get("missing")


@pytest.mark.asyncio
async def test_concurrent_create_same_id_resolves_to_one_channel(registry: ChannelRegistry) -> None:
    results = await asyncio.gather(*(registry.create("race") for _ in range(4)))
    assert {channel.id for channel in results} == {"race"}
    assert await registry.exists("race") is True


def test_registry_rejects_invalid_max_length() -> None:
    with pytest.raises(ValueError):
        ChannelRegistry(None, max_id_length=0)  # type: ignore[arg-type]
