"""Channel registry: channel identity and existence checks."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime

from sqlalchemy import DateTime, String, Text, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from cliplink.db import Base, session_scope
from cliplink.errors import InvalidInputError, NotFoundError, StorageUnavailableError
from cliplink.sync.models import MAX_CHANNEL_ID_LENGTH, Channel, as_utc, utc_now

logger = logging.getLogger(__name__)


class ChannelRecord(Base):
    """Tenancy root. Rows are never deleted by the service."""

    __tablename__ = "channels"

    id: Mapped[str] = mapped_column(String(MAX_CHANNEL_ID_LENGTH), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


def _to_channel(record: ChannelRecord) -> Channel:
    return Channel(
        id=record.id,
        name=record.name or "",
        description=record.description or "",
        created_at=as_utc(record.created_at),
        updated_at=as_utc(record.updated_at),
    )


def generate_channel_id() -> str:
    """128 random bits, hex encoded."""
    return secrets.token_hex(16)


class ChannelRegistry:
    """Creates and looks up channels."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_id_length: int = MAX_CHANNEL_ID_LENGTH,
    ) -> None:
        if max_id_length < 1 or max_id_length > MAX_CHANNEL_ID_LENGTH:
            raise ValueError(f"max_id_length must be between 1 and {MAX_CHANNEL_ID_LENGTH}")
        self._session_factory = session_factory
        self._max_id_length = max_id_length

    async def create(self, channel_id: str | None = None, *, name: str = "", description: str = "") -> Channel:
        """Create a channel, or return the existing one with the same id."""
        channel, _ = await self.get_or_create(channel_id, name=name, description=description)
        return channel

    async def get_or_create(
        self,
        channel_id: str | None = None,
        *,
        name: str = "",
        description: str = "",
    ) -> tuple[Channel, bool]:
        """Return (channel, created). An empty id generates a fresh one."""
        normalized = (channel_id or "").strip() or generate_channel_id()
        existing = await self._find(normalized)
        if existing is not None:
            return existing, False
        if len(normalized) > self._max_id_length:
            raise InvalidInputError(
                f"channel id must be at most {self._max_id_length} characters"
            )
        now = utc_now()
        record = ChannelRecord(
            id=normalized,
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )
        try:
            async with session_scope(self._session_factory) as session:
                session.add(record)
        except StorageUnavailableError as exc:
            if not isinstance(exc.__cause__, IntegrityError):
                raise
            # Lost a concurrent insert of the same id.
            existing = await self._find(normalized)
            if existing is None:
                raise
            return existing, False
        logger.info("Created channel %s", normalized)
        return _to_channel(record), True

    async def exists(self, channel_id: str | None) -> bool:
        normalized = (channel_id or "").strip()
        if not normalized or len(normalized) > MAX_CHANNEL_ID_LENGTH:
            return False
        return await self._find(normalized) is not None

    async def get(self, channel_id: str) -> Channel:
        """Raises NotFoundError when the channel does not exist."""
        normalized = (channel_id or "").strip()
        channel = await self._find(normalized) if normalized else None
        if channel is None:
            raise NotFoundError("channel", channel_id)
        return channel

    async def _find(self, channel_id: str) -> Channel | None:
        async with session_scope(self._session_factory) as session:
            record = await session.get(ChannelRecord, channel_id)
            return _to_channel(record) if record is not None else None
