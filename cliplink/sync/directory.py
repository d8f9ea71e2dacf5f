"""Device directory: global device identity and per-channel membership."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from cliplink.db import Base, session_scope
from cliplink.errors import InvalidInputError, NotFoundError, StorageUnavailableError
from cliplink.sync.models import (
    MAX_CHANNEL_ID_LENGTH,
    Device,
    DeviceType,
    DeviceView,
    as_utc,
    coerce_device_type,
    utc_now,
)

logger = logging.getLogger(__name__)

MAX_DEVICE_ID_LENGTH = 128


class DeviceRecord(Base):
    """A client endpoint. Presence here is process wide."""

    __tablename__ = "devices"

    id: Mapped[str] = mapped_column(String(MAX_DEVICE_ID_LENGTH), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False, default=DeviceType.OTHER.value)
    is_online: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


class DeviceChannelRecord(Base):
    """Membership of a device in a channel; at most one row per pair."""

    __tablename__ = "device_channels"

    device_id: Mapped[str] = mapped_column(
        String(MAX_DEVICE_ID_LENGTH),
        ForeignKey("devices.id", ondelete="CASCADE"),
        primary_key=True,
    )
    channel_id: Mapped[str] = mapped_column(
        String(MAX_CHANNEL_ID_LENGTH),
        ForeignKey("channels.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    last_seen_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


def _to_device(record: DeviceRecord) -> Device:
    return Device(
        id=record.id,
        name=record.name,
        type=coerce_device_type(record.type),
        is_online=bool(record.is_online),
        last_seen_at=as_utc(record.last_seen_at),
        created_at=as_utc(record.created_at),
        updated_at=as_utc(record.updated_at),
    )


def _to_view(device: DeviceRecord, membership: DeviceChannelRecord) -> DeviceView:
    return DeviceView(
        id=device.id,
        name=device.name,
        type=coerce_device_type(device.type),
        channel_id=membership.channel_id,
        is_online=bool(device.is_online),
        is_active=bool(membership.is_active),
        last_seen_at=as_utc(device.last_seen_at),
        last_seen_in_channel_at=as_utc(membership.last_seen_at),
        joined_at=as_utc(membership.joined_at),
        created_at=as_utc(device.created_at),
    )


def _is_conflict(exc: StorageUnavailableError) -> bool:
    return isinstance(exc.__cause__, IntegrityError)


class DeviceDirectory:
    """Device identity plus channel membership bookkeeping."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def register(
        self,
        name: str,
        device_type: str | DeviceType | None = None,
        device_id: str | None = None,
    ) -> Device:
        """Create the device, or refresh name/type/presence of an existing one."""
        normalized_name = (name or "").strip()
        if not normalized_name:
            raise InvalidInputError("device name is required")
        normalized_id = (device_id or "").strip() or str(uuid.uuid4())
        if len(normalized_id) > MAX_DEVICE_ID_LENGTH:
            raise InvalidInputError(f"device id must be at most {MAX_DEVICE_ID_LENGTH} characters")
        kind = coerce_device_type(device_type.value if isinstance(device_type, DeviceType) else device_type)
        try:
            return await self._upsert(normalized_id, normalized_name, kind)
        except StorageUnavailableError as exc:
            if not _is_conflict(exc):
                raise
            # Concurrent first registration; the row exists now.
            return await self._upsert(normalized_id, normalized_name, kind)

    async def _upsert(self, device_id: str, name: str, kind: DeviceType) -> Device:
        now = utc_now()
        async with session_scope(self._session_factory) as session:
            record = await session.get(DeviceRecord, device_id)
            if record is None:
                record = DeviceRecord(
                    id=device_id,
                    name=name,
                    type=kind.value,
                    is_online=True,
                    last_seen_at=now,
                    created_at=now,
                    updated_at=now,
                )
                session.add(record)
                logger.info("Registered device %s (%s)", device_id, kind.value)
            else:
                record.name = name
                record.type = kind.value
                record.is_online = True
                record.last_seen_at = now
                record.updated_at = now
            await session.flush()
            return _to_device(record)

    async def get(self, device_id: str) -> Device:
        async with session_scope(self._session_factory) as session:
            record = await session.get(DeviceRecord, device_id)
            if record is None:
                raise NotFoundError("device", device_id)
            return _to_device(record)

    async def add_to_channel(self, device_id: str, channel_id: str) -> DeviceView:
        """Join or rejoin; an existing membership is reactivated."""
        try:
            return await self._join(device_id, channel_id)
        except StorageUnavailableError as exc:
            if not _is_conflict(exc):
                raise
            return await self._join(device_id, channel_id)

    async def _join(self, device_id: str, channel_id: str) -> DeviceView:
        now = utc_now()
        async with session_scope(self._session_factory) as session:
            device = await session.get(DeviceRecord, device_id)
            if device is None:
                raise NotFoundError("device", device_id)
            membership = await session.get(DeviceChannelRecord, (device_id, channel_id))
            if membership is None:
                membership = DeviceChannelRecord(
                    device_id=device_id,
                    channel_id=channel_id,
                    is_active=True,
                    joined_at=now,
                    last_seen_at=now,
                )
                session.add(membership)
            else:
                membership.is_active = True
                membership.last_seen_at = now
            await session.flush()
            return _to_view(device, membership)

    async def remove_from_channel(self, device_id: str, channel_id: str) -> None:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                delete(DeviceChannelRecord).where(
                    DeviceChannelRecord.device_id == device_id,
                    DeviceChannelRecord.channel_id == channel_id,
                )
            )
            if result.rowcount == 0:
                raise NotFoundError("device", device_id, channel_id=channel_id)

    async def update_presence(self, device_id: str, is_online: bool) -> Device:
        """Set global presence and refresh last_seen_at."""
        now = utc_now()
        async with session_scope(self._session_factory) as session:
            record = await session.get(DeviceRecord, device_id)
            if record is None:
                raise NotFoundError("device", device_id)
            record.is_online = is_online
            record.last_seen_at = now
            record.updated_at = now
            await session.flush()
            return _to_device(record)

    async def update_in_channel(self, device_id: str, channel_id: str, is_active: bool) -> DeviceView:
        """Set channel-local presence without touching the global flag."""
        async with session_scope(self._session_factory) as session:
            device = await session.get(DeviceRecord, device_id)
            membership = await session.get(DeviceChannelRecord, (device_id, channel_id))
            if device is None or membership is None:
                raise NotFoundError("device", device_id, channel_id=channel_id)
            membership.is_active = is_active
            membership.last_seen_at = utc_now()
            await session.flush()
            return _to_view(device, membership)

    async def get_in_channel(self, device_id: str, channel_id: str) -> DeviceView:
        async with session_scope(self._session_factory) as session:
            row = (
                await session.execute(
                    select(DeviceRecord, DeviceChannelRecord)
                    .join(DeviceChannelRecord, DeviceChannelRecord.device_id == DeviceRecord.id)
                    .where(
                        DeviceRecord.id == device_id,
                        DeviceChannelRecord.channel_id == channel_id,
                    )
                )
            ).first()
            if row is None:
                raise NotFoundError("device", device_id, channel_id=channel_id)
            return _to_view(row[0], row[1])

    async def is_member(self, device_id: str, channel_id: str) -> bool:
        async with session_scope(self._session_factory) as session:
            return await session.get(DeviceChannelRecord, (device_id, channel_id)) is not None

    async def list_by_channel(self, channel_id: str) -> list[DeviceView]:
        """Members of the channel, most recently seen in the channel first."""
        async with session_scope(self._session_factory) as session:
            rows = (
                await session.execute(
                    select(DeviceRecord, DeviceChannelRecord)
                    .join(DeviceChannelRecord, DeviceChannelRecord.device_id == DeviceRecord.id)
                    .where(DeviceChannelRecord.channel_id == channel_id)
                    .order_by(DeviceChannelRecord.last_seen_at.desc(), DeviceRecord.id)
                )
            ).all()
            return [_to_view(device, membership) for device, membership in rows]

    async def count_online(self, channel_id: str) -> int:
        async with session_scope(self._session_factory) as session:
            stmt = (
                select(func.count())
                .select_from(DeviceChannelRecord)
                .join(DeviceRecord, DeviceChannelRecord.device_id == DeviceRecord.id)
                .where(
                    DeviceChannelRecord.channel_id == channel_id,
                    DeviceRecord.is_online.is_(True),
                )
            )
            return int((await session.execute(stmt)).scalar_one())

    async def count_total(self, channel_id: str) -> int:
        async with session_scope(self._session_factory) as session:
            stmt = (
                select(func.count())
                .select_from(DeviceChannelRecord)
                .where(DeviceChannelRecord.channel_id == channel_id)
            )
            return int((await session.execute(stmt)).scalar_one())

    async def rename(
        self,
        device_id: str,
        name: str,
        device_type: str | DeviceType | None = None,
    ) -> Device:
        """Change the display name and, when given, the device type."""
        normalized_name = (name or "").strip()
        if not normalized_name:
            raise InvalidInputError("device name is required")
        async with session_scope(self._session_factory) as session:
            record = await session.get(DeviceRecord, device_id)
            if record is None:
                raise NotFoundError("device", device_id)
            record.name = normalized_name
            if device_type:
                raw = device_type.value if isinstance(device_type, DeviceType) else device_type
                record.type = coerce_device_type(raw).value
            record.updated_at = utc_now()
            await session.flush()
            return _to_device(record)

    async def remove(self, device_id: str) -> None:
        """Delete the device and every membership it holds."""
        async with session_scope(self._session_factory) as session:
            await session.execute(delete(DeviceChannelRecord).where(DeviceChannelRecord.device_id == device_id))
            result = await session.execute(delete(DeviceRecord).where(DeviceRecord.id == device_id))
            if result.rowcount == 0:
                raise NotFoundError("device", device_id)
        logger.info("Removed device %s", device_id)
