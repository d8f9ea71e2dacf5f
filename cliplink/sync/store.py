"""Clipboard store: channel-scoped clipboard items."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from cliplink.db import Base, ChannelScoped, session_scope
from cliplink.errors import InvalidInputError, NotFoundError
from cliplink.sync.models import (
    MAX_FAVORITES_LIMIT,
    ClipboardItem,
    ContentType,
    DeviceType,
    ItemFilter,
    ItemPatch,
    NewItem,
    Page,
    PageRequest,
    as_utc,
    coerce_content_type,
    coerce_device_type,
    parse_content_type,
    parse_device_type,
    utc_now,
)
from cliplink.sync.query import (
    ChannelIs,
    DeviceTypeIs,
    FavoriteIs,
    KeywordMatches,
    Predicate,
    TypeIs,
    build_conditions,
    filter_predicates,
    title_rank,
)

logger = logging.getLogger(__name__)


class ClipboardItemRecord(ChannelScoped, Base):
    """One clipboard entry. Never visible outside its channel."""

    __tablename__ = "clipboard_items"
    __table_args__ = (
        Index("idx_clipboard_channel_created", "channel_id", "created_at"),
        Index("idx_clipboard_channel_type", "channel_id", "type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=ContentType.TEXT.value)
    device_id: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    device_type: Mapped[str] = mapped_column(String(16), nullable=False, default=DeviceType.OTHER.value)
    favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


def _to_item(record: ClipboardItemRecord) -> ClipboardItem:
    return ClipboardItem(
        id=record.id,
        channel_id=record.channel_id,
        title=record.title or "",
        content=record.content,
        type=coerce_content_type(record.type),
        device_id=record.device_id or "",
        device_type=coerce_device_type(record.device_type),
        favorite=bool(record.favorite),
        created_at=as_utc(record.created_at),
        updated_at=as_utc(record.updated_at),
    )


def _require_channel(channel_id: str | None) -> str:
    normalized = (channel_id or "").strip()
    if not normalized:
        raise InvalidInputError("channel_id is required")
    return normalized


def _enum_value(value: object) -> str | None:
    if isinstance(value, (ContentType, DeviceType)):
        return value.value
    return value if isinstance(value, str) else None


_NEWEST_FIRST = (ClipboardItemRecord.created_at.desc(), ClipboardItemRecord.id.desc())


class ClipboardStore:
    """CRUD, filtered listing, and search over clipboard items."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_favorites: int = MAX_FAVORITES_LIMIT,
    ) -> None:
        self._session_factory = session_factory
        self._max_favorites = max_favorites

    async def save(self, channel_id: str, item: NewItem) -> ClipboardItem:
        """Insert a new item; type and device_type are coerced, content is required."""
        channel_id = _require_channel(channel_id)
        if not item.content:
            raise InvalidInputError("content is required")
        now = utc_now()
        record = ClipboardItemRecord(
            id=str(uuid.uuid4()),
            channel_id=channel_id,
            title=item.title or "",
            content=item.content,
            type=coerce_content_type(_enum_value(item.type)).value,
            device_id=item.device_id or "",
            device_type=coerce_device_type(_enum_value(item.device_type)).value,
            favorite=False,
            created_at=now,
            updated_at=now,
        )
        async with session_scope(self._session_factory) as session:
            session.add(record)
        logger.debug("Saved clipboard item %s in channel %s", record.id, channel_id)
        return _to_item(record)

    async def get_by_id(self, item_id: str, channel_id: str) -> ClipboardItem:
        channel_id = _require_channel(channel_id)
        async with session_scope(self._session_factory) as session:
            record = await self._fetch(session, item_id, channel_id)
            return _to_item(record)

    async def get_latest(self, channel_id: str, limit: int = 1) -> list[ClipboardItem]:
        channel_id = _require_channel(channel_id)
        if limit < 1:
            return []
        async with session_scope(self._session_factory) as session:
            records = (
                await session.execute(
                    select(ClipboardItemRecord)
                    .where(ClipboardItemRecord.channel_id == channel_id)
                    .order_by(*_NEWEST_FIRST)
                    .limit(limit)
                )
            ).scalars()
            return [_to_item(r) for r in records]

    async def list_paginated(self, channel_id: str, page: int | None = None, size: int | None = None) -> Page:
        channel_id = _require_channel(channel_id)
        return await self._page([ChannelIs(channel_id)], PageRequest.of(page, size))

    async def list_by_filter(
        self,
        channel_id: str,
        item_filter: ItemFilter | None = None,
        page: int | None = None,
        size: int | None = None,
    ) -> Page:
        """Values outside the closed type sets are ignored rather than rejected."""
        channel_id = _require_channel(channel_id)
        return await self._page(filter_predicates(channel_id, item_filter), PageRequest.of(page, size))

    async def list_by_type(
        self,
        channel_id: str,
        content_type: str,
        page: int | None = None,
        size: int | None = None,
    ) -> Page:
        channel_id = _require_channel(channel_id)
        parsed = parse_content_type(_enum_value(content_type))
        if parsed is None:
            raise InvalidInputError(f"unknown content type: {content_type}")
        return await self._page([ChannelIs(channel_id), TypeIs(parsed)], PageRequest.of(page, size))

    async def list_by_device_type(
        self,
        channel_id: str,
        device_type: str,
        page: int | None = None,
        size: int | None = None,
    ) -> Page:
        channel_id = _require_channel(channel_id)
        parsed = parse_device_type(_enum_value(device_type))
        if parsed is None:
            raise InvalidInputError(f"unknown device type: {device_type}")
        return await self._page([ChannelIs(channel_id), DeviceTypeIs(parsed)], PageRequest.of(page, size))

    async def search(
        self,
        keyword: str,
        channel_id: str,
        page: int | None = None,
        size: int | None = None,
    ) -> Page:
        """Case-insensitive substring search; title hits rank before content-only hits.

        On SQLite, case folding covers ASCII letters only, so "école" does not
        match "École" there. PostgreSQL ILIKE folds according to the database locale.
        """
        channel_id = _require_channel(channel_id)
        request = PageRequest.of(page, size)
        normalized = (keyword or "").strip()
        if not normalized:
            return Page.empty(request)
        match = KeywordMatches(normalized)
        return await self._page(
            [ChannelIs(channel_id), match],
            request,
            order_by=(title_rank(ClipboardItemRecord, match), *_NEWEST_FIRST),
        )

    async def list_favorites(self, channel_id: str, limit: int | None = None) -> list[ClipboardItem]:
        channel_id = _require_channel(channel_id)
        capped = self._max_favorites if limit is None or limit < 1 else min(limit, self._max_favorites)
        conditions = build_conditions(ClipboardItemRecord, [ChannelIs(channel_id), FavoriteIs(True)])
        async with session_scope(self._session_factory) as session:
            records = (
                await session.execute(
                    select(ClipboardItemRecord)
                    .where(conditions)
                    .order_by(ClipboardItemRecord.updated_at.desc(), ClipboardItemRecord.id.desc())
                    .limit(capped)
                )
            ).scalars()
            return [_to_item(r) for r in records]

    async def update(self, item_id: str, channel_id: str, patch: ItemPatch) -> ClipboardItem:
        """Apply the non-empty patch fields. NotFoundError when no row matched."""
        channel_id = _require_channel(channel_id)
        values = patch.changes()
        async with session_scope(self._session_factory) as session:
            if not values:
                return _to_item(await self._fetch(session, item_id, channel_id))
            values["updated_at"] = utc_now()
            result = await session.execute(
                update(ClipboardItemRecord)
                .where(ClipboardItemRecord.id == item_id, ClipboardItemRecord.channel_id == channel_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError("clipboard item", item_id, channel_id=channel_id)
            record = await self._fetch(session, item_id, channel_id, refresh=True)
            return _to_item(record)

    async def toggle_favorite(self, item_id: str, channel_id: str, value: bool | None = None) -> ClipboardItem:
        """Set favorite to value, or flip it when value is None. Last writer wins."""
        channel_id = _require_channel(channel_id)
        async with session_scope(self._session_factory) as session:
            record = await self._fetch(session, item_id, channel_id)
            record.favorite = (not record.favorite) if value is None else bool(value)
            record.updated_at = utc_now()
            await session.flush()
            return _to_item(record)

    async def delete(self, item_id: str, channel_id: str) -> None:
        channel_id = _require_channel(channel_id)
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                delete(ClipboardItemRecord).where(
                    ClipboardItemRecord.id == item_id,
                    ClipboardItemRecord.channel_id == channel_id,
                )
            )
            if result.rowcount == 0:
                raise NotFoundError("clipboard item", item_id, channel_id=channel_id)

    async def count(self, channel_id: str) -> int:
        channel_id = _require_channel(channel_id)
        return await self._count([ChannelIs(channel_id)])

    async def count_by_type(self, content_type: str, channel_id: str) -> int:
        channel_id = _require_channel(channel_id)
        parsed = parse_content_type(_enum_value(content_type))
        if parsed is None:
            return 0
        return await self._count([ChannelIs(channel_id), TypeIs(parsed)])

    async def count_by_types(self, channel_id: str) -> dict[str, int]:
        """Item count for every content type, zero-filled."""
        channel_id = _require_channel(channel_id)
        counts = {t.value: 0 for t in ContentType}
        async with session_scope(self._session_factory) as session:
            rows = await session.execute(
                select(ClipboardItemRecord.type, func.count())
                .where(ClipboardItemRecord.channel_id == channel_id)
                .group_by(ClipboardItemRecord.type)
            )
            for type_value, n in rows:
                key = coerce_content_type(type_value).value
                counts[key] += int(n)
        return counts

    async def _fetch(
        self,
        session: AsyncSession,
        item_id: str,
        channel_id: str,
        *,
        refresh: bool = False,
    ) -> ClipboardItemRecord:
        stmt = select(ClipboardItemRecord).where(
            ClipboardItemRecord.id == item_id,
            ClipboardItemRecord.channel_id == channel_id,
        )
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        record = (await session.execute(stmt)).scalar_one_or_none()
        if record is None:
            raise NotFoundError("clipboard item", item_id, channel_id=channel_id)
        return record

    async def _count(self, predicates: list[Predicate]) -> int:
        conditions = build_conditions(ClipboardItemRecord, predicates)
        async with session_scope(self._session_factory) as session:
            stmt = select(func.count()).select_from(ClipboardItemRecord).where(conditions)
            return int((await session.execute(stmt)).scalar_one())

    async def _page(
        self,
        predicates: list[Predicate],
        request: PageRequest,
        order_by: tuple = _NEWEST_FIRST,
    ) -> Page:
        conditions = build_conditions(ClipboardItemRecord, predicates)
        async with session_scope(self._session_factory) as session:
            total = int(
                (
                    await session.execute(
                        select(func.count()).select_from(ClipboardItemRecord).where(conditions)
                    )
                ).scalar_one()
            )
            records = (
                await session.execute(
                    select(ClipboardItemRecord)
                    .where(conditions)
                    .order_by(*order_by)
                    .offset(request.offset)
                    .limit(request.size)
                )
            ).scalars()
            items = [_to_item(r) for r in records]
        return Page(items=items, total=total, page=request.page, size=request.size)
