"""Tagged predicates for clipboard item queries.

Each predicate compiles to a bound-parameter SQLAlchemy expression against the
clipboard item table. Callers compose them into a list; the store ANDs them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from sqlalchemy import ColumnElement, and_, case, or_

from cliplink.sync.models import ContentType, DeviceType, ItemFilter, parse_content_type, parse_device_type

LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class ChannelIs:
    channel_id: str


@dataclass(frozen=True)
class TypeIs:
    type: ContentType


@dataclass(frozen=True)
class DeviceTypeIs:
    device_type: DeviceType


@dataclass(frozen=True)
class FavoriteIs:
    favorite: bool


@dataclass(frozen=True)
class KeywordMatches:
    """Case-insensitive substring match on title or content."""

    keyword: str

    @property
    def pattern(self) -> str:
        return f"%{escape_like(self.keyword)}%"


Predicate = Union[ChannelIs, TypeIs, DeviceTypeIs, FavoriteIs, KeywordMatches]


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so they match literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def compile_predicate(model: Any, predicate: Predicate) -> ColumnElement[bool]:
    """Compile one predicate against the ORM model's columns."""
    if isinstance(predicate, ChannelIs):
        return model.channel_id == predicate.channel_id
    if isinstance(predicate, TypeIs):
        return model.type == predicate.type.value
    if isinstance(predicate, DeviceTypeIs):
        return model.device_type == predicate.device_type.value
    if isinstance(predicate, FavoriteIs):
        return model.favorite.is_(predicate.favorite)
    if isinstance(predicate, KeywordMatches):
        pattern = predicate.pattern
        return or_(
            model.title.ilike(pattern, escape=LIKE_ESCAPE),
            model.content.ilike(pattern, escape=LIKE_ESCAPE),
        )
    raise TypeError(f"unsupported predicate: {type(predicate).__name__}")


def build_conditions(model: Any, predicates: list[Predicate]) -> ColumnElement[bool]:
    """AND all predicates together. A ChannelIs predicate is required."""
    if not any(isinstance(p, ChannelIs) for p in predicates):
        raise ValueError("clipboard queries must be scoped by channel")
    return and_(*(compile_predicate(model, p) for p in predicates))


def title_rank(model: Any, predicate: KeywordMatches) -> ColumnElement[int]:
    """0 for rows whose title matches the keyword, 1 otherwise."""
    return case((model.title.ilike(predicate.pattern, escape=LIKE_ESCAPE), 0), else_=1)


def filter_predicates(channel_id: str, item_filter: ItemFilter | None) -> list[Predicate]:
    """Translate an ItemFilter; values outside the closed sets are dropped."""
    predicates: list[Predicate] = [ChannelIs(channel_id)]
    if item_filter is None:
        return predicates
    content_type = parse_content_type(item_filter.type)
    if content_type is not None:
        predicates.append(TypeIs(content_type))
    device_type = parse_device_type(item_filter.device_type)
    if device_type is not None:
        predicates.append(DeviceTypeIs(device_type))
    return predicates
