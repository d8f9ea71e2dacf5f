"""Sync ledger: append-only audit trail of synchronization actions."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column

from cliplink.db import Base, ChannelScoped, session_scope
from cliplink.sync.models import SyncAction, SyncEntry, as_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100


class SyncHistoryRecord(ChannelScoped, Base):
    """Ledger row. Never updated or deleted."""

    __tablename__ = "sync_history"
    __table_args__ = (Index("idx_sync_history_channel_created", "channel_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    device_id: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


def _to_entry(record: SyncHistoryRecord) -> SyncEntry:
    return SyncEntry(
        id=record.id,
        channel_id=record.channel_id,
        device_id=record.device_id or "",
        action=record.action,
        content=record.content or "",
        created_at=as_utc(record.created_at),
    )


class SyncLedger:
    """Append and read ledger entries for a channel."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(
        self,
        device_id: str,
        channel_id: str,
        action: str | SyncAction,
        content: str = "",
    ) -> SyncEntry:
        """Insert one entry. The action label is stored as given."""
        label = action.value if isinstance(action, SyncAction) else str(action)
        record = SyncHistoryRecord(
            channel_id=channel_id,
            device_id=device_id or "",
            action=label,
            content=content or "",
            created_at=utc_now(),
        )
        async with session_scope(self._session_factory) as session:
            session.add(record)
            await session.flush()
            entry = _to_entry(record)
        logger.debug("Ledger %s %s by %s", channel_id, label, device_id)
        return entry

    async def list_by_channel(
        self,
        channel_id: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
    ) -> list[SyncEntry]:
        """Newest first; ties on created_at resolve by id."""
        if limit < 1:
            return []
        async with session_scope(self._session_factory) as session:
            records = (
                await session.execute(
                    select(SyncHistoryRecord)
                    .where(SyncHistoryRecord.channel_id == channel_id)
                    .order_by(SyncHistoryRecord.created_at.desc(), SyncHistoryRecord.id.desc())
                    .offset(max(offset, 0))
                    .limit(limit)
                )
            ).scalars()
            return [_to_entry(r) for r in records]

    async def count(self, channel_id: str) -> int:
        async with session_scope(self._session_factory) as session:
            stmt = (
                select(func.count())
                .select_from(SyncHistoryRecord)
                .where(SyncHistoryRecord.channel_id == channel_id)
            )
            return int((await session.execute(stmt)).scalar_one())
