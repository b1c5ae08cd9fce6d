"""Builders for RCP-style response bodies used across tests."""

from typing import Iterable


def hex_octets(data: Iterable[int]) -> str:
    """Render bytes the way RCP does: space separated two-digit hex."""
    return " ".join(f"{b:02x}" for b in data)


def octet_dump(lines: Iterable[str]) -> str:
    """Encode lines as a zero-separated UTF-16LE dump."""
    text = "".join(f"{line}\0" for line in lines)
    return hex_octets(text.encode("utf-16-le"))


def rcp_reply(payload: str = None, err: str = None) -> str:
    parts = ["<rcp>", "<command><hex>0x0aae</hex></command>", "<result>"]
    if payload is not None:
        parts.append(f"<str>{payload}</str>")
    if err is not None:
        parts.append(f"<err>{err}</err>")
    parts.extend(["</result>", "</rcp>"])
    return "".join(parts)
