"""Shared FastAPI dependencies: facade lookup and channel resolution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Query, Request

from cliplink.config.models import ClipLinkConfig
from cliplink.sync.facade import SyncFacade

CHANNEL_HEADER = "X-Channel-ID"


def get_facade(request: Request) -> SyncFacade:
    return request.app.state.facade


def get_config(request: Request) -> ClipLinkConfig:
    return request.app.state.config


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        return ""
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


async def get_channel_id(
    facade: Annotated[SyncFacade, Depends(get_facade)],
    x_channel_id: Annotated[str | None, Header(alias=CHANNEL_HEADER)] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Resolve the caller's channel from X-Channel-ID or a bearer token."""
    channel_id = (x_channel_id or "").strip() or _bearer_token(authorization)
    if not channel_id:
        raise HTTPException(status_code=400, detail=f"{CHANNEL_HEADER} header is required")
    if not await facade.channel_exists(channel_id):
        raise HTTPException(status_code=404, detail="channel not found")
    return channel_id


@dataclass(frozen=True)
class PageParams:
    page: int
    size: int


def get_page_params(
    config: Annotated[ClipLinkConfig, Depends(get_config)],
    page: int = Query(1),
    size: int | None = Query(None),
) -> PageParams:
    """Non-positive values fall back to defaults; size is capped by configuration."""
    sync = config.sync
    normalized_size = sync.default_page_size if size is None or size < 1 else min(size, sync.max_page_size)
    return PageParams(page=page if page >= 1 else 1, size=normalized_size)


facade_type = Annotated[SyncFacade, Depends(get_facade)]
channel_id_type = Annotated[str, Depends(get_channel_id)]
page_params_type = Annotated[PageParams, Depends(get_page_params)]
