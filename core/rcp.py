"""RCP payload decoding - recording state register (0x0aae)."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

STATUS_COMMAND = "0x0aae"


class RecordingState(int, Enum):
    OFF = 0
    NO_RECORDING = 1
    STAND_BY = 2
    PRE_ALARM_RECORDING = 3
    ALARM_RECORDING = 4
    POST_ALARM_RECORDING = 5

    @property
    def label(self) -> str:
        return self.name.replace("_", " ")


def map_rec_state(code: int) -> str:
    """Display name for a recording state ordinal, UNKNOWN(n) when out of range."""
    try:
        return RecordingState(code).label
    except ValueError:
        return f"UNKNOWN({code})"


@dataclass
class DecodedStatus:
    """First four octets of the recording state register."""
    state_code: Optional[int] = None
    rec_preset: Optional[int] = None
    enc_preset: Optional[int] = None
    flags: Optional[int] = None
    err: Optional[str] = None

    @property
    def state(self) -> Optional[str]:
        if self.state_code is None:
            return None
        return map_rec_state(self.state_code)


@dataclass
class DecodeFailure:
    """Response carried no usable payload."""
    reason: str


def extract_tag(tag: str, xml: str) -> Optional[str]:
    """Trimmed content of the first <tag>...</tag>, case-insensitive."""
    match = re.search(rf"<{tag}>([\s\S]*?)</{tag}>", str(xml), re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return None


def decode_hex_octets(payload: str) -> List[int]:
    """
    Split a whitespace separated hex dump into byte values.

    Malformed tokens decode to 0 so one bad token cannot sink the whole
    payload. Such a byte cannot be told apart from a genuine zero, which is
    why every occurrence is logged.
    """
    octets = []
    for token in payload.split():
        try:
            octets.append(int(token, 16) & 0xFF)
        except ValueError:
            logger.warning(f"Malformed hex token {token!r} in RCP payload, decoded as 0")
            octets.append(0)
    return octets


def decode_status(xml_body: str) -> Union[DecodedStatus, DecodeFailure]:
    """Decode a 0x0aae reply. Never raises."""
    err = extract_tag("err", xml_body)
    payload = extract_tag("str", xml_body)

    if not payload:
        return DecodeFailure(reason=err or "no <str>")

    octets = decode_hex_octets(payload)

    def octet(index: int) -> Optional[int]:
        return octets[index] if index < len(octets) else None

    return DecodedStatus(
        state_code=octet(0),
        rec_preset=octet(1),
        enc_preset=octet(2),
        flags=octet(3),
        err=err or None,
    )
