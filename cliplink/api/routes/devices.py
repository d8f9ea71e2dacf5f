"""Device registration and presence endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from cliplink.api.deps import channel_id_type, facade_type
from cliplink.api.schemas import (
    DeviceRegisterRequest,
    DeviceRenameRequest,
    DeviceResponse,
    DeviceStatusRequest,
    MessageResponse,
)

router = APIRouter(prefix="/api/devices", tags=["devices"])


@router.post("", response_model=DeviceResponse)
async def register_device(
    body: DeviceRegisterRequest,
    channel_id: channel_id_type,
    facade: facade_type,
) -> DeviceResponse:
    view = await facade.register_device(channel_id, body.device_name, body.device_type, body.device_id)
    return DeviceResponse.from_view(view)


@router.get("", response_model=list[DeviceResponse])
async def list_devices(channel_id: channel_id_type, facade: facade_type) -> list[DeviceResponse]:
    return [DeviceResponse.from_view(view) for view in await facade.list_devices(channel_id)]


@router.get("/{device_id}", response_model=DeviceResponse)
async def get_device(device_id: str, channel_id: channel_id_type, facade: facade_type) -> DeviceResponse:
    return DeviceResponse.from_view(await facade.get_device(channel_id, device_id))


@router.put("/{device_id}/status", response_model=DeviceResponse)
async def update_status(
    device_id: str,
    body: DeviceStatusRequest,
    channel_id: channel_id_type,
    facade: facade_type,
) -> DeviceResponse:
    return DeviceResponse.from_view(await facade.set_device_status(channel_id, device_id, body.is_online))


@router.put("/{device_id}/name", response_model=DeviceResponse)
async def rename_device(
    device_id: str,
    body: DeviceRenameRequest,
    channel_id: channel_id_type,
    facade: facade_type,
) -> DeviceResponse:
    view = await facade.rename_device(channel_id, device_id, body.device_name, body.device_type)
    return DeviceResponse.from_view(view)


@router.delete("/{device_id}", response_model=MessageResponse)
async def remove_device(device_id: str, channel_id: channel_id_type, facade: facade_type) -> MessageResponse:
    await facade.remove_device(channel_id, device_id)
    return MessageResponse(message="device removed")
