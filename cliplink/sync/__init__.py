"""Multi-tenant clipboard synchronization core."""

from cliplink.sync.directory import DeviceChannelRecord, DeviceDirectory, DeviceRecord
from cliplink.sync.facade import SyncFacade
from cliplink.sync.ledger import SyncHistoryRecord, SyncLedger
from cliplink.sync.models import (
    Channel,
    ChannelStats,
    ClipboardItem,
    ContentType,
    Device,
    DeviceType,
    DeviceView,
    ItemFilter,
    ItemPatch,
    NewItem,
    Page,
    PageRequest,
    SyncAction,
    SyncEntry,
)
from cliplink.sync.registry import ChannelRecord, ChannelRegistry
from cliplink.sync.store import ClipboardItemRecord, ClipboardStore

__all__ = [
    "Channel",
    "ChannelRecord",
    "ChannelRegistry",
    "ChannelStats",
    "ClipboardItem",
    "ClipboardItemRecord",
    "ClipboardStore",
    "ContentType",
    "Device",
    "DeviceChannelRecord",
    "DeviceDirectory",
    "DeviceRecord",
    "DeviceType",
    "DeviceView",
    "ItemFilter",
    "ItemPatch",
    "NewItem",
    "Page",
    "PageRequest",
    "SyncAction",
    "SyncEntry",
    "SyncFacade",
    "SyncHistoryRecord",
    "SyncLedger",
]
