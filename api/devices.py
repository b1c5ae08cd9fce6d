"""Device registry API endpoints."""

from typing import List, Optional
from fastapi import APIRouter
from pydantic import BaseModel, Field

from core.registry import Device, registry

router = APIRouter(prefix="/api", tags=["devices"])


class DeviceItem(BaseModel):
    """A device as sent and returned by the API."""
    ip: str = Field(..., description="Device IP address")
    name: Optional[str] = Field(default=None, description="Display name")


class DevicesResponse(BaseModel):
    cameras: List[DeviceItem]


class AddDevicesRequest(BaseModel):
    """Request model for adding devices manually."""
    ips: List[str] = Field(default_factory=list, description="Bare IPs to add")
    items: List[DeviceItem] = Field(default_factory=list, description="IPs with optional names")


class AddDevicesResponse(BaseModel):
    ok: bool
    count: int


def to_items(devices) -> List[DeviceItem]:
    return [DeviceItem(ip=d.ip, name=d.name) for d in devices]


@router.get("/cameras", response_model=DevicesResponse)
async def list_devices():
    """List registered devices."""
    return DevicesResponse(cameras=to_items(registry.devices))


@router.post("/cameras", response_model=AddDevicesResponse)
async def add_devices(data: AddDevicesRequest):
    """Merge manually entered devices into the registry."""
    incoming = [Device(ip=str(ip).strip()) for ip in data.ips]
    for item in data.items:
        name = item.name.strip() if item.name else None
        incoming.append(Device(ip=item.ip.strip(), name=name or None))

    devices = await registry.merge(incoming)
    return AddDevicesResponse(ok=True, count=len(devices))


@router.post("/forget")
async def forget_devices():
    """Remove every registered device."""
    await registry.forget()
    return {"ok": True}
