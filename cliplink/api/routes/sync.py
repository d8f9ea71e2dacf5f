"""Sync ledger endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from cliplink.api.deps import channel_id_type, facade_type
from cliplink.api.schemas import SyncEntryResponse, SyncLogRequest
from cliplink.sync.ledger import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT

router = APIRouter(prefix="/api/sync", tags=["sync"])


@router.get("/history", response_model=list[SyncEntryResponse])
async def sync_history(
    channel_id: channel_id_type,
    facade: facade_type,
    limit: int = Query(DEFAULT_HISTORY_LIMIT),
    offset: int = Query(0),
) -> list[SyncEntryResponse]:
    """Newest entries first. An out-of-range limit falls back to the default."""
    if not 1 <= limit <= MAX_HISTORY_LIMIT:
        limit = DEFAULT_HISTORY_LIMIT
    entries = await facade.sync_history(channel_id, limit, max(offset, 0))
    return [SyncEntryResponse.from_entry(entry) for entry in entries]


@router.post("/log", response_model=SyncEntryResponse)
async def log_sync(body: SyncLogRequest, channel_id: channel_id_type, facade: facade_type) -> SyncEntryResponse:
    return SyncEntryResponse.from_entry(await facade.log_sync(channel_id, body.device_id, body.content))
