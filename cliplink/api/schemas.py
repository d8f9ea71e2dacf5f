"""Request/response schemas for the ClipLink HTTP API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from cliplink.sync.models import ChannelStats, ClipboardItem, DeviceView, Page, SyncEntry


class ChannelCreateRequest(BaseModel):
    """Body for POST /api/channel. Omitted channel_id generates one."""

    channel_id: str = ""
    name: str = ""
    description: str = ""


class ChannelVerifyRequest(BaseModel):
    channel_id: str = ""


class ChannelResponse(BaseModel):
    channel_id: str
    name: str = ""
    description: str = ""
    created_at: datetime
    updated_at: datetime


class VerifyResponse(BaseModel):
    success: bool


class ClipboardItemCreateRequest(BaseModel):
    """Body for POST /api/clipboard."""

    content: str = Field(min_length=1)
    title: str = ""
    type: str = "text"
    device_id: str = ""
    device_type: str = "other"


class ClipboardItemUpdateRequest(BaseModel):
    """Body for PUT /api/clipboard/{item_id}. Empty fields are left unchanged."""

    title: str | None = None
    content: str | None = None
    type: str | None = None
    device_id: str | None = None
    device_type: str | None = None
    clear_title: bool = False
    is_favorite: bool | None = None


class FavoriteRequest(BaseModel):
    """Body for PUT /api/clipboard/{item_id}/favorite. Missing is_favorite flips the flag."""

    is_favorite: bool | None = None
    device_id: str = ""


class ClipboardItemResponse(BaseModel):
    id: str
    channel_id: str
    title: str
    content: str
    type: str
    device_id: str
    device_type: str
    favorite: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_item(cls, item: ClipboardItem) -> ClipboardItemResponse:
        return cls(
            id=item.id,
            channel_id=item.channel_id,
            title=item.title,
            content=item.content,
            type=item.type.value,
            device_id=item.device_id,
            device_type=item.device_type.value,
            favorite=item.favorite,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class ClipboardPageResponse(BaseModel):
    """Paginated clipboard listing."""

    items: list[ClipboardItemResponse] = Field(default_factory=list)
    total: int
    page: int
    size: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> ClipboardPageResponse:
        return cls(
            items=[ClipboardItemResponse.from_item(item) for item in page.items],
            total=page.total,
            page=page.page,
            size=page.size,
            total_pages=page.total_pages,
        )


class DeviceRegisterRequest(BaseModel):
    device_id: str = ""
    device_name: str = Field(min_length=1)
    device_type: str = "other"


class DeviceStatusRequest(BaseModel):
    is_online: bool


class DeviceRenameRequest(BaseModel):
    device_name: str = Field(min_length=1)
    device_type: str | None = None


class DeviceResponse(BaseModel):
    id: str
    name: str
    type: str
    channel_id: str
    is_online: bool
    is_active: bool
    last_seen_at: datetime
    last_seen_in_channel_at: datetime
    joined_at: datetime
    created_at: datetime

    @classmethod
    def from_view(cls, view: DeviceView) -> DeviceResponse:
        return cls(
            id=view.id,
            name=view.name,
            type=view.type.value,
            channel_id=view.channel_id,
            is_online=view.is_online,
            is_active=view.is_active,
            last_seen_at=view.last_seen_at,
            last_seen_in_channel_at=view.last_seen_in_channel_at,
            joined_at=view.joined_at,
            created_at=view.created_at,
        )


class SyncLogRequest(BaseModel):
    device_id: str = Field(min_length=1)
    content: str = ""


class SyncEntryResponse(BaseModel):
    id: int
    channel_id: str
    device_id: str
    action: str
    content: str
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: SyncEntry) -> SyncEntryResponse:
        return cls(
            id=entry.id,
            channel_id=entry.channel_id,
            device_id=entry.device_id,
            action=entry.action,
            content=entry.content,
            created_at=entry.created_at,
        )


class ChannelStatsResponse(BaseModel):
    channel_id: str
    item_count: int
    items_by_type: dict[str, int] = Field(default_factory=dict)
    online_device_count: int
    total_device_count: int
    sync_count: int
    created_at: datetime
    generated_at: datetime

    @classmethod
    def from_stats(cls, stats: ChannelStats) -> ChannelStatsResponse:
        return cls(
            channel_id=stats.channel_id,
            item_count=stats.item_count,
            items_by_type=dict(stats.items_by_type),
            online_device_count=stats.online_device_count,
            total_device_count=stats.total_device_count,
            sync_count=stats.sync_count,
            created_at=stats.created_at,
            generated_at=stats.generated_at,
        )


class MessageResponse(BaseModel):
    message: str
