"""Data models for clipboard synchronization: entity snapshots, closed type sets, pagination."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_FAVORITES_LIMIT = 10_000
MAX_CHANNEL_ID_LENGTH = 64


class ContentType(str, Enum):
    """Kind of clipboard payload."""

    TEXT = "text"
    LINK = "link"
    CODE = "code"
    PASSWORD = "password"
    IMAGE = "image"
    FILE = "file"


class DeviceType(str, Enum):
    """Form factor of a device."""

    PHONE = "phone"
    TABLET = "tablet"
    DESKTOP = "desktop"
    OTHER = "other"


class SyncAction(str, Enum):
    """Well-known ledger actions. The ledger also accepts free-form labels."""

    SYNC = "sync"
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    UPDATE = "update"
    DELETE = "delete"
    FAVORITE = "favorite"
    UNFAVORITE = "unfavorite"


_CONTENT_TYPES = {e.value for e in ContentType}
_DEVICE_TYPES = {e.value for e in DeviceType}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_content_type(value: str | None) -> ContentType | None:
    """Return the matching ContentType, or None when value is not in the closed set."""
    normalized = (value or "").strip().lower()
    return ContentType(normalized) if normalized in _CONTENT_TYPES else None


def parse_device_type(value: str | None) -> DeviceType | None:
    """Return the matching DeviceType, or None when value is not in the closed set."""
    normalized = (value or "").strip().lower()
    return DeviceType(normalized) if normalized in _DEVICE_TYPES else None


def coerce_content_type(value: str | None) -> ContentType:
    """Unknown content types become text; never rejected."""
    return parse_content_type(value) or ContentType.TEXT


def coerce_device_type(value: str | None) -> DeviceType:
    """Unknown device types become other; never rejected."""
    return parse_device_type(value) or DeviceType.OTHER


@dataclass(frozen=True)
class Channel:
    """Tenancy boundary shared by a group of devices."""

    id: str
    created_at: datetime
    updated_at: datetime
    name: str = ""
    description: str = ""


@dataclass(frozen=True)
class Device:
    """Client endpoint with global presence."""

    id: str
    name: str
    type: DeviceType
    last_seen_at: datetime
    is_online: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class DeviceView:
    """Device joined with its membership in one channel."""

    id: str
    name: str
    type: DeviceType
    channel_id: str
    is_online: bool
    is_active: bool
    last_seen_at: datetime
    last_seen_in_channel_at: datetime
    joined_at: datetime
    created_at: datetime


@dataclass(frozen=True)
class ClipboardItem:
    """One synchronized piece of content owned by a single channel."""

    id: str
    channel_id: str
    content: str
    type: ContentType
    device_id: str
    device_type: DeviceType
    favorite: bool
    created_at: datetime
    updated_at: datetime
    title: str = ""


@dataclass(frozen=True)
class SyncEntry:
    """Append-only ledger row."""

    id: int
    channel_id: str
    device_id: str
    action: str
    content: str
    created_at: datetime


@dataclass
class NewItem:
    """Fields supplied when saving a clipboard item."""

    content: str
    title: str = ""
    type: str | ContentType = ContentType.TEXT
    device_id: str = ""
    device_type: str | DeviceType = DeviceType.OTHER


@dataclass
class ItemPatch:
    """Partial update for a clipboard item.

    None or empty string leaves a field unchanged. Clearing the title needs
    the explicit clear_title flag.
    """

    title: str | None = None
    content: str | None = None
    type: str | None = None
    device_id: str | None = None
    device_type: str | None = None
    clear_title: bool = False

    def changes(self) -> dict[str, object]:
        """Column values to write, with closed-set fields coerced."""
        values: dict[str, object] = {}
        if self.clear_title:
            values["title"] = ""
        elif self.title:
            values["title"] = self.title
        if self.content:
            values["content"] = self.content
        if self.type:
            values["type"] = coerce_content_type(self.type).value
        if self.device_id:
            values["device_id"] = self.device_id
        if self.device_type:
            values["device_type"] = coerce_device_type(self.device_type).value
        return values


@dataclass(frozen=True)
class ItemFilter:
    """Optional type / device type filter. Unknown values mean no filter."""

    type: str | None = None
    device_type: str | None = None


@dataclass(frozen=True)
class PageRequest:
    """Normalized 1-indexed page request."""

    page: int
    size: int

    @classmethod
    def of(cls, page: int | None, size: int | None) -> PageRequest:
        """Clamp page to >= 1 and size to 1..MAX_PAGE_SIZE (non-positive size means default)."""
        normalized_page = page if page is not None and page >= 1 else DEFAULT_PAGE
        if size is None or size < 1:
            normalized_size = DEFAULT_PAGE_SIZE
        else:
            normalized_size = min(size, MAX_PAGE_SIZE)
        return cls(page=normalized_page, size=normalized_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


@dataclass(frozen=True)
class Page:
    """One page of clipboard items plus totals."""

    items: list[ClipboardItem]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    @classmethod
    def empty(cls, request: PageRequest) -> Page:
        return cls(items=[], total=0, page=request.page, size=request.size)


@dataclass(frozen=True)
class ChannelStats:
    """Read-only aggregate across all components for one channel."""

    channel_id: str
    item_count: int
    online_device_count: int
    total_device_count: int
    sync_count: int
    created_at: datetime
    generated_at: datetime
    items_by_type: dict[str, int] = field(default_factory=dict)
