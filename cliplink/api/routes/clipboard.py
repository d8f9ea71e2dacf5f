"""Clipboard item endpoints, scoped to the caller's channel."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from cliplink.api.deps import channel_id_type, facade_type, page_params_type
from cliplink.api.schemas import (
    ClipboardItemCreateRequest,
    ClipboardItemResponse,
    ClipboardItemUpdateRequest,
    ClipboardPageResponse,
    FavoriteRequest,
    MessageResponse,
)
from cliplink.sync.models import ItemPatch

router = APIRouter(prefix="/api/clipboard", tags=["clipboard"])


@router.post("", response_model=ClipboardItemResponse)
async def save_item(
    body: ClipboardItemCreateRequest,
    channel_id: channel_id_type,
    facade: facade_type,
) -> ClipboardItemResponse:
    item = await facade.save_item(
        channel_id,
        body.content,
        title=body.title,
        content_type=body.type,
        device_id=body.device_id,
        device_type=body.device_type,
    )
    return ClipboardItemResponse.from_item(item)


@router.get("", response_model=list[ClipboardItemResponse])
async def latest_items(
    channel_id: channel_id_type,
    facade: facade_type,
    limit: int = Query(1, ge=1, le=100),
) -> list[ClipboardItemResponse]:
    items = await facade.latest_items(channel_id, limit)
    return [ClipboardItemResponse.from_item(item) for item in items]


@router.get("/current", response_model=ClipboardItemResponse | None)
async def current_item(channel_id: channel_id_type, facade: facade_type) -> ClipboardItemResponse | None:
    item = await facade.current_item(channel_id)
    return ClipboardItemResponse.from_item(item) if item is not None else None


@router.get("/history", response_model=ClipboardPageResponse)
async def history(channel_id: channel_id_type, facade: facade_type, paging: page_params_type) -> ClipboardPageResponse:
    return ClipboardPageResponse.from_page(await facade.history(channel_id, paging.page, paging.size))


@router.get("/favorites", response_model=list[ClipboardItemResponse])
async def favorites(
    channel_id: channel_id_type,
    facade: facade_type,
    limit: int = Query(20, ge=1, le=10_000),
) -> list[ClipboardItemResponse]:
    items = await facade.favorite_items(channel_id, limit)
    return [ClipboardItemResponse.from_item(item) for item in items]


@router.get("/filter", response_model=ClipboardPageResponse)
async def filter_items(
    channel_id: channel_id_type,
    facade: facade_type,
    paging: page_params_type,
    type: str | None = Query(None),
    device_type: str | None = Query(None),
) -> ClipboardPageResponse:
    page = await facade.filter_items(channel_id, type, device_type, paging.page, paging.size)
    return ClipboardPageResponse.from_page(page)


@router.get("/search", response_model=ClipboardPageResponse)
async def search(
    channel_id: channel_id_type,
    facade: facade_type,
    paging: page_params_type,
    q: str = Query(""),
) -> ClipboardPageResponse:
    if not q.strip():
        raise HTTPException(status_code=400, detail="search keyword is required")
    return ClipboardPageResponse.from_page(await facade.search_items(channel_id, q, paging.page, paging.size))


@router.get("/type/{content_type}", response_model=ClipboardPageResponse)
async def items_by_type(
    content_type: str,
    channel_id: channel_id_type,
    facade: facade_type,
    paging: page_params_type,
) -> ClipboardPageResponse:
    page = await facade.items_by_type(channel_id, content_type, paging.page, paging.size)
    return ClipboardPageResponse.from_page(page)


@router.get("/device/{device_type}", response_model=ClipboardPageResponse)
async def items_by_device_type(
    device_type: str,
    channel_id: channel_id_type,
    facade: facade_type,
    paging: page_params_type,
) -> ClipboardPageResponse:
    page = await facade.items_by_device_type(channel_id, device_type, paging.page, paging.size)
    return ClipboardPageResponse.from_page(page)


@router.get("/{item_id}", response_model=ClipboardItemResponse)
async def get_item(item_id: str, channel_id: channel_id_type, facade: facade_type) -> ClipboardItemResponse:
    return ClipboardItemResponse.from_item(await facade.get_item(item_id, channel_id))


@router.put("/{item_id}", response_model=ClipboardItemResponse)
async def update_item(
    item_id: str,
    body: ClipboardItemUpdateRequest,
    channel_id: channel_id_type,
    facade: facade_type,
) -> ClipboardItemResponse:
    patch = ItemPatch(
        title=body.title,
        content=body.content,
        type=body.type,
        device_id=body.device_id,
        device_type=body.device_type,
        clear_title=body.clear_title,
    )
    if patch.changes() or body.is_favorite is None:
        item = await facade.update_item(item_id, channel_id, patch, device_id=body.device_id)
    if body.is_favorite is not None:
        item = await facade.toggle_favorite(item_id, channel_id, body.is_favorite, device_id=body.device_id)
    return ClipboardItemResponse.from_item(item)


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_item(item_id: str, channel_id: channel_id_type, facade: facade_type) -> MessageResponse:
    await facade.delete_item(item_id, channel_id)
    return MessageResponse(message="clipboard item deleted")


@router.put("/{item_id}/favorite", response_model=ClipboardItemResponse)
async def toggle_favorite(
    item_id: str,
    channel_id: channel_id_type,
    facade: facade_type,
    body: FavoriteRequest | None = None,
) -> ClipboardItemResponse:
    body = body or FavoriteRequest()
    item = await facade.toggle_favorite(item_id, channel_id, body.is_favorite, device_id=body.device_id or None)
    return ClipboardItemResponse.from_item(item)
