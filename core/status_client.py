"""Per-device recording status query."""

import logging
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

from core.rcp import STATUS_COMMAND, DecodeFailure, decode_status
from core.transport import TransportError, TransportTimeout, http_get

logger = logging.getLogger(__name__)


@dataclass
class DeviceStatus:
    """Result of one status query. Failures populate error, never raise."""
    ip: str
    name: Optional[str] = None
    state_code: Optional[int] = None
    state: Optional[str] = None
    rec_preset: Optional[int] = None
    enc_preset: Optional[int] = None
    flags: Optional[int] = None
    http_status: Optional[int] = None
    error: Optional[str] = None
    source_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def to_api(self) -> Dict[str, Any]:
        """Key layout used by the dashboard."""
        return {
            "name": self.name,
            "ip": self.ip,
            "stateCode": self.state_code,
            "state": self.state,
            "recPreset": self.rec_preset,
            "encPreset": self.enc_preset,
            "flags": self.flags,
            "http": self.http_status,
            "err": self.error,
            "url": self.source_url,
        }


def build_status_url(ip: str, channel: int = 1, secure: bool = False) -> str:
    proto = "https" if secure else "http"
    return f"{proto}://{ip}/rcp.xml?command={STATUS_COMMAND}&type=P_OCTET&direction=READ&num={channel}"


async def query_device(
    ip: str,
    username: str,
    password: str,
    channel: int = 1,
    timeout: float = 5.0,
    secure: bool = False,
    verify_tls: bool = False,
    name: Optional[str] = None,
) -> DeviceStatus:
    """
    Read the recording state register of one device.

    Args:
        ip: Device address
        username: Basic auth user
        password: Basic auth password
        channel: Video channel (num parameter)
        timeout: Seconds before the request is abandoned
        secure: Use HTTPS
        verify_tls: Verify the device certificate (HTTPS only)
        name: Display name copied into the result

    Returns:
        DeviceStatus; transport and decode problems are reported in error
    """
    url = build_status_url(ip, channel, secure)

    try:
        resp = await http_get(url, username, password, timeout=timeout, verify_tls=verify_tls)
    except TransportTimeout:
        return DeviceStatus(ip=ip, name=name, error="timeout")
    except TransportError as e:
        return DeviceStatus(ip=ip, name=name, error=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error querying {ip}: {e}")
        return DeviceStatus(ip=ip, name=name, error=str(e) or e.__class__.__name__)

    decoded = decode_status(resp.body)
    if isinstance(decoded, DecodeFailure):
        return DeviceStatus(
            ip=ip,
            name=name,
            http_status=resp.status,
            error=decoded.reason,
            source_url=url,
        )

    return DeviceStatus(
        ip=ip,
        name=name,
        state_code=decoded.state_code,
        state=decoded.state,
        rec_preset=decoded.rec_preset,
        enc_preset=decoded.enc_preset,
        flags=decoded.flags,
        http_status=resp.status,
        error=decoded.err,
        source_url=url,
    )
