"""HTTP transport shared by the status client and gateway discovery."""

import asyncio
import aiohttp
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Request never produced an HTTP response (refused, DNS, reset...)."""


class TransportTimeout(TransportError):
    """Request did not complete within its timeout."""

    def __init__(self, message: str = "timeout"):
        super().__init__(message)


@dataclass
class HttpResponse:
    """Status and decoded body of a completed request."""
    status: int
    body: str
    url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


async def http_get(
    url: str,
    username: str = "",
    password: str = "",
    timeout: float = 5.0,
    verify_tls: bool = True,
) -> HttpResponse:
    """
    Issue a single GET request.

    Args:
        url: Absolute request URL
        username: Basic auth user; no Authorization header when empty
        password: Basic auth password
        timeout: Hard limit in seconds for the whole request
        verify_tls: When False, certificate checks are skipped for this call only

    Returns:
        HttpResponse for any HTTP status, including non-2xx

    Raises:
        TransportTimeout: timeout expired
        TransportError: no response was received
    """
    auth = aiohttp.BasicAuth(username, password) if username else None
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    ssl = None if verify_tls else False

    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url, auth=auth, ssl=ssl) as resp:
                raw = await resp.read()
                return HttpResponse(
                    status=resp.status,
                    body=raw.decode("utf-8", errors="replace"),
                    url=url,
                )
    except asyncio.TimeoutError:
        raise TransportTimeout()
    except aiohttp.ClientError as e:
        raise TransportError(str(e) or e.__class__.__name__) from e
    except OSError as e:
        raise TransportError(str(e)) from e
