"""Declarative base and channel_id mixin for ClipLink ORM models."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


class Base(DeclarativeBase):
    """Base class for all ClipLink ORM models. Exposes metadata for schema creation."""


class ChannelScoped:
    """Mixin for rows owned by exactly one channel.

    channel_id is mandatory; every query against these tables filters on it.
    """

    @declared_attr
    def channel_id(cls) -> Mapped[str]:
        return mapped_column(
            String(64),
            ForeignKey("channels.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
            doc="Owning channel (tenancy boundary).",
        )
