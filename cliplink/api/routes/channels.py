"""Channel creation and verification endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from cliplink.api.deps import facade_type
from cliplink.api.schemas import ChannelCreateRequest, ChannelResponse, ChannelVerifyRequest, VerifyResponse
from cliplink.sync.models import Channel

router = APIRouter(prefix="/api", tags=["channels"])


def _channel_response(channel: Channel) -> ChannelResponse:
    return ChannelResponse(
        channel_id=channel.id,
        name=channel.name,
        description=channel.description,
        created_at=channel.created_at,
        updated_at=channel.updated_at,
    )


@router.post("/channel", response_model=ChannelResponse)
async def create_channel(facade: facade_type, body: ChannelCreateRequest | None = None) -> ChannelResponse:
    body = body or ChannelCreateRequest()
    channel = await facade.create_channel(body.channel_id, name=body.name, description=body.description)
    return _channel_response(channel)


@router.post("/channel/verify", response_model=VerifyResponse)
async def verify_channel(body: ChannelVerifyRequest, facade: facade_type) -> VerifyResponse:
    if not body.channel_id.strip():
        raise HTTPException(status_code=400, detail="channel ID is required")
    if not await facade.channel_exists(body.channel_id):
        raise HTTPException(status_code=404, detail="channel not found")
    return VerifyResponse(success=True)


@router.get("/channels/{channel_id}", response_model=ChannelResponse)
async def get_channel(channel_id: str, facade: facade_type) -> ChannelResponse:
    return _channel_response(await facade.get_channel(channel_id))


@router.get("/channels/{channel_id}/verify", response_model=VerifyResponse)
async def verify_channel_path(channel_id: str, facade: facade_type) -> VerifyResponse:
    if not await facade.channel_exists(channel_id):
        raise HTTPException(status_code=404, detail="channel not found")
    return VerifyResponse(success=True)
