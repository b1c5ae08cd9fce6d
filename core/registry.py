"""Device registry - keyed merge and the process-wide device set."""

import asyncio
import logging
from dataclasses import dataclass, asdict
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Device:
    """A monitored device. The IP is the identity; name is advisory."""
    ip: str
    name: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


# Discovery results share the Device shape
DiscoveryCandidate = Device


def merge(existing: Iterable[Device], incoming: Iterable[Device]) -> List[Device]:
    """
    Keyed union by IP.

    An incoming name replaces the stored one; an incoming None keeps it.
    Result order is existing devices first, then new IPs as first seen.
    """
    by_ip: Dict[str, Device] = {}
    for device in existing:
        by_ip[device.ip] = device

    for candidate in incoming:
        ip = (candidate.ip or "").strip()
        if not ip:
            continue
        prev = by_ip.get(ip)
        name = candidate.name if candidate.name is not None else (prev.name if prev else None)
        by_ip[ip] = Device(ip=ip, name=name)

    return list(by_ip.values())


class DeviceRegistry:
    """
    Holds the current device set as an immutable tuple.

    Every mutation builds a new tuple and swaps it in, so readers never see
    a half-applied merge. Writers are serialized so concurrent merges cannot
    drop each other's updates.
    """

    def __init__(self, save: Optional[Callable[[List[Device]], Awaitable[None]]] = None):
        self._devices: Tuple[Device, ...] = ()
        self._save = save
        self._lock = asyncio.Lock()

    @property
    def devices(self) -> Tuple[Device, ...]:
        return self._devices

    def bind_store(self, save: Optional[Callable[[List[Device]], Awaitable[None]]]):
        """Set the persistence callback run after each mutation."""
        self._save = save

    def load(self, devices: Iterable[Device]):
        """Replace the set without persisting (startup)."""
        self._devices = tuple(merge([], devices))

    async def replace(self, devices: Iterable[Device]) -> Tuple[Device, ...]:
        async with self._lock:
            return await self._swap(merge([], devices))

    async def merge(self, incoming: Iterable[Device]) -> Tuple[Device, ...]:
        async with self._lock:
            return await self._swap(merge(self._devices, incoming))

    async def forget(self) -> Tuple[Device, ...]:
        async with self._lock:
            return await self._swap([])

    async def _swap(self, devices: List[Device]) -> Tuple[Device, ...]:
        """Persist first; the in-memory set only changes once the save succeeded."""
        if self._save:
            await self._save(list(devices))
        self._devices = tuple(devices)
        logger.debug(f"Registry now holds {len(self._devices)} devices")
        return self._devices


# Global instance
registry = DeviceRegistry()
