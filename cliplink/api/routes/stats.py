"""Channel statistics endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from cliplink.api.deps import channel_id_type, facade_type
from cliplink.api.schemas import ChannelStatsResponse

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("", response_model=ChannelStatsResponse)
async def channel_stats(channel_id: channel_id_type, facade: facade_type) -> ChannelStatsResponse:
    return ChannelStatsResponse.from_stats(await facade.channel_stats(channel_id))
