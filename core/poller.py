"""Recording status poller - worker pool, snapshot and periodic loop."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from config import settings
from core.registry import Device, DeviceRegistry, registry
from core.status_client import DeviceStatus, query_device

logger = logging.getLogger(__name__)

QueryFunc = Callable[..., Awaitable[DeviceStatus]]


@dataclass
class PollOptions:
    """Per-device query parameters for one round."""
    username: str = ""
    password: str = ""
    channel: int = 1
    timeout: float = 5.0
    secure: bool = False
    verify_tls: bool = False
    workers: int = 4

    @classmethod
    def from_settings(cls) -> "PollOptions":
        return cls(
            username=settings.cam_user,
            password=settings.cam_pass,
            channel=settings.cam_channel,
            timeout=settings.cam_timeout,
            secure=settings.cam_secure,
            workers=settings.poll_workers,
        )


@dataclass(frozen=True)
class StatusSnapshot:
    """Results of the latest completed round."""
    ts: Optional[float] = None  # Epoch milliseconds
    items: Tuple[DeviceStatus, ...] = field(default_factory=tuple)


async def poll_all(
    devices: Sequence[Device],
    options: PollOptions,
    query: QueryFunc = query_device,
) -> List[DeviceStatus]:
    """
    Query every device using a fixed-width worker pool.

    Returns one status per device; order follows completion, not input.
    """
    if not devices:
        return []

    queue: asyncio.Queue = asyncio.Queue()
    for device in devices:
        queue.put_nowait(device)

    width = max(1, min(options.workers, len(devices)))
    results: List[DeviceStatus] = []

    async def worker():
        while True:
            try:
                device = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                status = await query(
                    device.ip,
                    options.username,
                    options.password,
                    channel=options.channel,
                    timeout=options.timeout,
                    secure=options.secure,
                    verify_tls=options.verify_tls,
                    name=device.name,
                )
            except Exception as e:
                logger.exception(f"Status query for {device.ip} failed: {e}")
                status = DeviceStatus(ip=device.ip, name=device.name, error=str(e) or e.__class__.__name__)
            results.append(status)

    await asyncio.gather(*(worker() for _ in range(width)))
    return results


class Poller:
    """Runs poll rounds over the registry and keeps the latest snapshot."""

    def __init__(
        self,
        devices: DeviceRegistry = registry,
        options: Optional[PollOptions] = None,
        query: QueryFunc = query_device,
    ):
        self._registry = devices
        self._options = options
        self._query = query
        self._snapshot = StatusSnapshot()
        self._round: Optional[asyncio.Task] = None
        self._loop_task: Optional[asyncio.Task] = None
        self._interval: Optional[float] = None

    @property
    def snapshot(self) -> StatusSnapshot:
        return self._snapshot

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def interval(self) -> Optional[float]:
        return self._interval if self.running else None

    @property
    def in_flight(self) -> bool:
        return self._round is not None and not self._round.done()

    async def poll_once(self) -> StatusSnapshot:
        """
        Run one round and publish its snapshot.

        If a round is already in flight, wait for it instead of starting
        another one.
        """
        if not self.in_flight:
            self._round = asyncio.create_task(self._run_round())
        return await asyncio.shield(self._round)

    async def _run_round(self) -> StatusSnapshot:
        devices = self._registry.devices
        options = self._options or PollOptions.from_settings()
        started = time.monotonic()

        items = await poll_all(devices, options, self._query)

        self._snapshot = StatusSnapshot(ts=time.time() * 1000, items=tuple(items))
        failed = sum(1 for s in items if s.state is None)
        logger.debug(
            f"Poll round: {len(items)} devices, {failed} without state, "
            f"{time.monotonic() - started:.2f}s"
        )
        return self._snapshot

    def start(self, interval: float):
        """Start (or restart with a new interval) the periodic loop."""
        if self.running:
            self._loop_task.cancel()
        self._interval = interval
        self._loop_task = asyncio.create_task(self._poll_loop(interval))
        logger.info(f"Periodic polling every {interval:.1f}s")

    async def stop(self):
        """Stop the periodic loop and wait for an in-flight round to finish."""
        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
            logger.info("Periodic polling stopped")
        self._interval = None

        if self.in_flight:
            await asyncio.wait([self._round])

    def _tick(self):
        if self.in_flight:
            logger.debug("Poll round still in flight, skipping tick")
            return
        self._round = asyncio.create_task(self._run_round())
        self._round.add_done_callback(self._round_done)

    @staticmethod
    def _round_done(task: asyncio.Task):
        if not task.cancelled() and task.exception():
            logger.error(f"Poll round failed: {task.exception()!r}")

    async def _poll_loop(self, interval: float):
        """Tick every interval; ticks landing on an in-flight round are skipped."""
        while True:
            try:
                self._tick()
            except Exception as e:
                logger.exception(f"Error in poll loop: {e}")
            try:
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                break


# Global instance
poller = Poller()
