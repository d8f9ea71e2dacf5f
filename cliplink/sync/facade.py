"""Synchronization facade: the single entry point outer layers call.

Composes the channel registry, device directory, clipboard store and sync
ledger, and enforces the invariants that span them. Ledger writes that
accompany a mutation are best effort: the mutation has already committed, so
a failed append is logged and swallowed.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cliplink.errors import InvalidInputError, NotFoundError
from cliplink.sync.directory import DeviceDirectory
from cliplink.sync.ledger import DEFAULT_HISTORY_LIMIT, SyncLedger
from cliplink.sync.models import (
    MAX_CHANNEL_ID_LENGTH,
    MAX_FAVORITES_LIMIT,
    Channel,
    ChannelStats,
    ClipboardItem,
    ContentType,
    DeviceType,
    DeviceView,
    ItemFilter,
    ItemPatch,
    NewItem,
    Page,
    SyncAction,
    SyncEntry,
    utc_now,
)
from cliplink.sync.registry import ChannelRegistry
from cliplink.sync.store import ClipboardStore

logger = logging.getLogger(__name__)

DEFAULT_WELCOME_TITLE = "Welcome"
DEFAULT_WELCOME_TEXT = (
    "Welcome to ClipLink! Open this channel on another device to share clipboard content between them."
)
SYSTEM_DEVICE_ID = "system"
SUMMARY_LENGTH = 50


def _summary(item: ClipboardItem) -> str:
    if item.title:
        return item.title
    text = item.content.strip().replace("\n", " ")
    return text if len(text) <= SUMMARY_LENGTH else text[:SUMMARY_LENGTH] + "..."


class SyncFacade:
    """Channel-scoped synchronization operations."""

    def __init__(
        self,
        registry: ChannelRegistry,
        directory: DeviceDirectory,
        store: ClipboardStore,
        ledger: SyncLedger,
        *,
        seed_welcome_item: bool = False,
        welcome_text: str = DEFAULT_WELCOME_TEXT,
    ) -> None:
        self.registry = registry
        self.directory = directory
        self.store = store
        self.ledger = ledger
        self._seed_welcome_item = seed_welcome_item
        self._welcome_text = welcome_text

    @classmethod
    def from_session_factory(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        max_channel_id_length: int = MAX_CHANNEL_ID_LENGTH,
        max_favorites: int = MAX_FAVORITES_LIMIT,
        seed_welcome_item: bool = False,
        welcome_text: str = DEFAULT_WELCOME_TEXT,
    ) -> SyncFacade:
        """Build every component on one injected session factory."""
        return cls(
            ChannelRegistry(session_factory, max_id_length=max_channel_id_length),
            DeviceDirectory(session_factory),
            ClipboardStore(session_factory, max_favorites=max_favorites),
            SyncLedger(session_factory),
            seed_welcome_item=seed_welcome_item,
            welcome_text=welcome_text,
        )

    # Channels

    async def create_channel(self, channel_id: str | None = None, *, name: str = "", description: str = "") -> Channel:
        channel, created = await self.registry.get_or_create(channel_id, name=name, description=description)
        if created and self._seed_welcome_item:
            await self.store.save(
                channel.id,
                NewItem(
                    content=self._welcome_text,
                    title=DEFAULT_WELCOME_TITLE,
                    type=ContentType.TEXT,
                    device_id=SYSTEM_DEVICE_ID,
                    device_type=DeviceType.OTHER,
                ),
            )
        return channel

    async def get_channel(self, channel_id: str) -> Channel:
        return await self.registry.get(channel_id)

    async def channel_exists(self, channel_id: str | None) -> bool:
        return await self.registry.exists(channel_id)

    async def _require_channel(self, channel_id: str) -> Channel:
        if not (channel_id or "").strip():
            raise InvalidInputError("channel_id is required")
        return await self.registry.get(channel_id)

    # Devices

    async def register_device(
        self,
        channel_id: str,
        name: str,
        device_type: str | None = None,
        device_id: str | None = None,
    ) -> DeviceView:
        """Register (or refresh) a device and join it to the channel."""
        await self._require_channel(channel_id)
        device = await self.directory.register(name, device_type, device_id)
        view = await self.directory.add_to_channel(device.id, channel_id)
        await self._record(device.id, channel_id, SyncAction.CONNECT, f"device connected: {device.name}")
        return view

    async def get_device(self, channel_id: str, device_id: str) -> DeviceView:
        return await self.directory.get_in_channel(device_id, channel_id)

    async def list_devices(self, channel_id: str) -> list[DeviceView]:
        await self._require_channel(channel_id)
        return await self.directory.list_by_channel(channel_id)

    async def set_device_status(self, channel_id: str, device_id: str, is_online: bool) -> DeviceView:
        """Update global and channel presence together."""
        if not await self.directory.is_member(device_id, channel_id):
            raise NotFoundError("device", device_id, channel_id=channel_id)
        device = await self.directory.update_presence(device_id, is_online)
        view = await self.directory.update_in_channel(device_id, channel_id, is_online)
        action = SyncAction.CONNECT if is_online else SyncAction.DISCONNECT
        verb = "connected" if is_online else "disconnected"
        await self._record(device_id, channel_id, action, f"device {verb}: {device.name}")
        return view

    async def rename_device(
        self,
        channel_id: str,
        device_id: str,
        name: str,
        device_type: str | None = None,
    ) -> DeviceView:
        if not await self.directory.is_member(device_id, channel_id):
            raise NotFoundError("device", device_id, channel_id=channel_id)
        await self.directory.rename(device_id, name, device_type)
        return await self.directory.get_in_channel(device_id, channel_id)

    async def remove_device(self, channel_id: str, device_id: str) -> None:
        """Remove the device from this channel only."""
        await self.directory.remove_from_channel(device_id, channel_id)
        await self._record(device_id, channel_id, SyncAction.DISCONNECT, "device removed from channel")

    # Clipboard writes

    async def save_item(
        self,
        channel_id: str,
        content: str,
        *,
        title: str = "",
        content_type: str | None = None,
        device_id: str = "",
        device_type: str | None = None,
    ) -> ClipboardItem:
        """Store new content. Saving does not write a ledger entry."""
        await self._require_channel(channel_id)
        if not content:
            raise InvalidInputError("content is required")
        return await self.store.save(
            channel_id,
            NewItem(
                content=content,
                title=title or "",
                type=content_type or ContentType.TEXT,
                device_id=device_id or "",
                device_type=device_type or DeviceType.OTHER,
            ),
        )

    async def update_item(
        self,
        item_id: str,
        channel_id: str,
        patch: ItemPatch,
        device_id: str | None = None,
    ) -> ClipboardItem:
        """Apply the patch; a patch with nothing to change leaves the ledger alone."""
        item = await self.store.update(item_id, channel_id, patch)
        if not patch.changes():
            return item
        await self._record(
            device_id or item.device_id,
            channel_id,
            SyncAction.UPDATE,
            f"updated clipboard item: {item.type.value}",
        )
        return await self.store.get_by_id(item_id, channel_id)

    async def toggle_favorite(
        self,
        item_id: str,
        channel_id: str,
        value: bool | None = None,
        device_id: str | None = None,
    ) -> ClipboardItem:
        """Set or flip the favorite flag and log favorite/unfavorite."""
        item = await self.store.toggle_favorite(item_id, channel_id, value)
        action = SyncAction.FAVORITE if item.favorite else SyncAction.UNFAVORITE
        await self._record(device_id or item.device_id, channel_id, action, _summary(item))
        return await self.store.get_by_id(item_id, channel_id)

    async def delete_item(self, item_id: str, channel_id: str, device_id: str | None = None) -> None:
        item = await self.store.get_by_id(item_id, channel_id)
        await self.store.delete(item_id, channel_id)
        await self._record(
            device_id or item.device_id,
            channel_id,
            SyncAction.DELETE,
            f"deleted clipboard item: {item.type.value}",
        )

    # Clipboard reads

    async def get_item(self, item_id: str, channel_id: str) -> ClipboardItem:
        return await self.store.get_by_id(item_id, channel_id)

    async def latest_items(self, channel_id: str, limit: int = 10) -> list[ClipboardItem]:
        await self._require_channel(channel_id)
        return await self.store.get_latest(channel_id, limit)

    async def current_item(self, channel_id: str) -> ClipboardItem | None:
        """Newest item in the channel, or None when it is empty."""
        await self._require_channel(channel_id)
        items = await self.store.get_latest(channel_id, 1)
        return items[0] if items else None

    async def history(self, channel_id: str, page: int | None = None, size: int | None = None) -> Page:
        await self._require_channel(channel_id)
        return await self.store.list_paginated(channel_id, page, size)

    async def filter_items(
        self,
        channel_id: str,
        content_type: str | None = None,
        device_type: str | None = None,
        page: int | None = None,
        size: int | None = None,
    ) -> Page:
        await self._require_channel(channel_id)
        return await self.store.list_by_filter(
            channel_id, ItemFilter(type=content_type, device_type=device_type), page, size
        )

    async def items_by_type(
        self, channel_id: str, content_type: str, page: int | None = None, size: int | None = None
    ) -> Page:
        await self._require_channel(channel_id)
        return await self.store.list_by_type(channel_id, content_type, page, size)

    async def items_by_device_type(
        self, channel_id: str, device_type: str, page: int | None = None, size: int | None = None
    ) -> Page:
        await self._require_channel(channel_id)
        return await self.store.list_by_device_type(channel_id, device_type, page, size)

    async def search_items(
        self, channel_id: str, keyword: str, page: int | None = None, size: int | None = None
    ) -> Page:
        await self._require_channel(channel_id)
        return await self.store.search(keyword, channel_id, page, size)

    async def favorite_items(self, channel_id: str, limit: int | None = None) -> list[ClipboardItem]:
        await self._require_channel(channel_id)
        return await self.store.list_favorites(channel_id, limit)

    # Ledger

    async def log_sync(self, channel_id: str, device_id: str, content: str = "") -> SyncEntry:
        """Explicit sync record requested by a client; failures propagate."""
        await self._require_channel(channel_id)
        return await self.ledger.append(device_id, channel_id, SyncAction.SYNC, content)

    async def sync_history(
        self,
        channel_id: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
    ) -> list[SyncEntry]:
        await self._require_channel(channel_id)
        return await self.ledger.list_by_channel(channel_id, limit, offset)

    # Stats

    async def channel_stats(self, channel_id: str) -> ChannelStats:
        """Aggregate counts for the channel. Read only."""
        channel = await self._require_channel(channel_id)
        by_type = await self.store.count_by_types(channel_id)
        return ChannelStats(
            channel_id=channel.id,
            item_count=sum(by_type.values()),
            items_by_type=by_type,
            online_device_count=await self.directory.count_online(channel_id),
            total_device_count=await self.directory.count_total(channel_id),
            sync_count=await self.ledger.count(channel_id),
            created_at=channel.created_at,
            generated_at=utc_now(),
        )

    async def _record(self, device_id: str, channel_id: str, action: SyncAction, content: str) -> None:
        try:
            await self.ledger.append(device_id, channel_id, action, content)
        except Exception:
            logger.exception("Failed to record %s for channel %s", action.value, channel_id)
