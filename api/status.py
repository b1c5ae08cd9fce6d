"""Recording status API endpoints."""

from typing import List, Optional
from fastapi import APIRouter
from pydantic import BaseModel, Field

from core.poller import StatusSnapshot, poller

router = APIRouter(prefix="/api", tags=["status"])


class StatusResponse(BaseModel):
    ts: Optional[float]
    items: List[dict]


class PollOnceResponse(StatusResponse):
    ok: bool = True


class PollStartRequest(BaseModel):
    periodMs: int = Field(default=5000, ge=500, description="Polling period in milliseconds")


class PollStartResponse(BaseModel):
    ok: bool
    periodMs: int


def render(snapshot: StatusSnapshot) -> dict:
    return {"ts": snapshot.ts, "items": [s.to_api() for s in snapshot.items]}


@router.get("/status", response_model=StatusResponse)
async def get_status():
    """Latest snapshot; polls once first when periodic polling is off."""
    if not poller.running:
        await poller.poll_once()
    return StatusResponse(**render(poller.snapshot))


@router.post("/poll/once", response_model=PollOnceResponse)
async def poll_once():
    """Run a poll round now and return its results."""
    snapshot = await poller.poll_once()
    return PollOnceResponse(ok=True, **render(snapshot))


@router.post("/poll/start", response_model=PollStartResponse)
async def start_polling(data: Optional[PollStartRequest] = None):
    """Start (or restart) periodic polling."""
    data = data or PollStartRequest()
    poller.start(data.periodMs / 1000)
    return PollStartResponse(ok=True, periodMs=data.periodMs)


@router.post("/poll/stop")
async def stop_polling():
    """Stop periodic polling."""
    await poller.stop()
    return {"ok": True}
