"""VRM Discovery module - recover device IPs and names from a gateway."""

import json
import logging
from typing import Callable, List, Optional, Sequence

from config import settings
from core.extractor import CandidateKind, extract_candidates, merge_candidates
from core.registry import Device, DiscoveryCandidate
from core.transport import HttpResponse, TransportError, http_get

logger = logging.getLogger(__name__)

# Registers whose dumps list the devices attached to a VRM
DISCOVERY_COMMANDS = ("0xD007", "0xD028", "0xD052", "0xD05B", "0xD060")

ProgressCallback = Callable[[int, int], None]


class VRMDiscovery:
    """Discover devices behind a VRM gateway."""

    def __init__(self, timeout: Optional[float] = None, verify_tls: Optional[bool] = None):
        self.timeout = timeout
        self.verify_tls = verify_tls

    async def discover(
        self,
        host: str,
        username: str = "",
        password: str = "",
        secure: bool = True,
    ) -> List[Device]:
        """
        Probe one gateway and return its devices, deduplicated by IP.

        Args:
            host: Gateway address or hostname (optionally host:port)
            username: Gateway user; anonymous when empty
            password: Gateway password
            secure: Use HTTPS

        Returns:
            Devices found; an unreachable gateway yields an empty list
        """
        proto = "https" if secure else "http"
        base = f"{proto}://{host}"
        logger.info(f"Discovering devices from VRM at {host}")

        found = await self._probe_json_list(base, username, password)
        for command in DISCOVERY_COMMANDS:
            more = await self._probe_rcp_dump(base, username, password, command)
            found = merge_candidates(found, more)

        named = sum(1 for d in found if d.name)
        logger.info(f"VRM {host}: {len(found)} devices ({named} named)")
        return [Device(ip=c.ip, name=c.name) for c in found]

    async def discover_hosts(
        self,
        hosts: Sequence[str],
        username: str = "",
        password: str = "",
        secure: bool = True,
        progress: Optional[ProgressCallback] = None,
    ) -> List[Device]:
        """Discover each host in turn. Per-host results are concatenated, not merged."""
        found: List[Device] = []
        for i, host in enumerate(hosts, start=1):
            found.extend(await self.discover(host, username, password, secure))
            if progress:
                progress(i, len(hosts))
        return found

    async def _get(self, url: str, username: str, password: str) -> Optional[HttpResponse]:
        """GET that reports any failure as None."""
        timeout = self.timeout if self.timeout is not None else settings.vrm_timeout
        verify_tls = self.verify_tls if self.verify_tls is not None else settings.vrm_verify_tls
        try:
            resp = await http_get(url, username, password, timeout=timeout, verify_tls=verify_tls)
        except TransportError as e:
            logger.debug(f"Probe {url} failed: {e}")
            return None
        if not resp.ok:
            logger.debug(f"Probe {url} returned HTTP {resp.status}")
            return None
        return resp

    async def _probe_json_list(self, base: str, username: str, password: str) -> List[DiscoveryCandidate]:
        resp = await self._get(f"{base}/devices.json", username, password)
        if resp is None:
            return []
        try:
            data = json.loads(resp.body)
        except ValueError:
            logger.debug(f"{base}/devices.json is not JSON")
            return []
        return extract_candidates(data, CandidateKind.JSON)

    async def _probe_rcp_dump(
        self, base: str, username: str, password: str, command: str
    ) -> List[DiscoveryCandidate]:
        url = f"{base}/rcp.xml?command={command}&type=P_OCTET&direction=READ"
        resp = await self._get(url, username, password)
        if resp is None:
            return []
        return merge_candidates(
            extract_candidates(resp.body, CandidateKind.TEXT),
            extract_candidates(resp.body, CandidateKind.OCTET_DUMP),
        )


# Global instance
vrm_discovery = VRMDiscovery()
