"""VRM discovery API endpoints."""

import asyncio
import logging
import secrets
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from config import settings
from core.discovery import vrm_discovery
from core.registry import registry
from api.devices import DeviceItem, to_items

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/discover", tags=["discovery"])


class DiscoverRequest(BaseModel):
    """Request model for VRM discovery."""
    hosts: Optional[List[str]] = Field(default=None, description="Gateway hosts; configured hosts when omitted")


class DiscoverResponse(BaseModel):
    ok: bool
    found: int
    cameras: List[DeviceItem]


class JobStartResponse(BaseModel):
    ok: bool
    id: str


class JobStatusResponse(BaseModel):
    ok: bool
    id: str
    state: str
    progress: int
    processedHosts: int
    totalHosts: int
    found: int
    error: Optional[str]
    done: bool


@dataclass
class DiscoveryJob:
    """Progress of a background discovery run."""
    id: str
    hosts: List[str]
    state: str = "running"  # running, done, error
    processed_hosts: int = 0
    found: int = 0
    error: Optional[str] = None
    task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def progress(self) -> int:
        if not self.hosts:
            return 100
        return int(self.processed_hosts * 100 / len(self.hosts))

    @property
    def done(self) -> bool:
        return self.state != "running"


_jobs: Dict[str, DiscoveryJob] = {}
_current: Optional[DiscoveryJob] = None

# Finished jobs kept around for status polling
MAX_FINISHED_JOBS = 10


def _prune_jobs():
    """Drop the oldest finished jobs beyond MAX_FINISHED_JOBS."""
    finished = [job_id for job_id, job in _jobs.items() if job.done]
    for job_id in finished[:max(0, len(finished) - MAX_FINISHED_JOBS)]:
        del _jobs[job_id]


def resolve_hosts(hosts: Optional[List[str]]) -> List[str]:
    if hosts is None:
        return settings.vrm_host_list
    return [h.strip() for h in hosts if h and h.strip()]


async def run_discovery(hosts: List[str], job: Optional[DiscoveryJob] = None) -> int:
    """Discover every host, merge the results into the registry. Returns candidate count."""

    def on_progress(processed: int, total: int):
        if job:
            job.processed_hosts = processed

    found = await vrm_discovery.discover_hosts(
        hosts,
        username=settings.vrm_user,
        password=settings.vrm_pass,
        secure=settings.vrm_secure,
        progress=on_progress,
    )
    await registry.merge(found)
    return len(found)


async def _run_job(job: DiscoveryJob):
    try:
        job.found = await run_discovery(job.hosts, job)
        job.state = "done"
    except Exception as e:
        logger.exception(f"Discovery job {job.id} failed: {e}")
        job.error = str(e)
        job.state = "error"


# Endpoints

@router.post("", response_model=DiscoverResponse)
async def discover(data: Optional[DiscoverRequest] = None):
    """Discover devices from the gateways and merge them into the registry."""
    hosts = resolve_hosts(data.hosts if data else None)
    found = await run_discovery(hosts)
    return DiscoverResponse(ok=True, found=found, cameras=to_items(registry.devices))


@router.post("/start", response_model=JobStartResponse)
async def start_discovery(data: Optional[DiscoverRequest] = None):
    """Start discovery in the background. Returns the running job if there is one."""
    global _current
    if _current and not _current.done:
        return JobStartResponse(ok=True, id=_current.id)

    job = DiscoveryJob(id=secrets.token_urlsafe(8), hosts=resolve_hosts(data.hosts if data else None))
    _prune_jobs()
    job.task = asyncio.create_task(_run_job(job))
    _jobs[job.id] = job
    _current = job
    return JobStartResponse(ok=True, id=job.id)


@router.get("/status", response_model=JobStatusResponse)
async def discovery_status(id: str = Query(..., description="Job ID")):
    """Progress of a discovery job."""
    job = _jobs.get(id)
    if not job:
        raise HTTPException(status_code=404, detail="Discovery job not found")

    return JobStatusResponse(
        ok=True,
        id=job.id,
        state=job.state,
        progress=job.progress,
        processedHosts=job.processed_hosts,
        totalHosts=len(job.hosts),
        found=job.found,
        error=job.error,
        done=job.done,
    )
