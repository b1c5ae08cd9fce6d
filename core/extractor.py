"""Heuristic IP/name extraction from gateway responses.

All functions here are pure: text in, candidates out. They never raise on
malformed input; no match simply yields an empty list.
"""

import json
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from core.rcp import decode_hex_octets, extract_tag
from core.registry import DiscoveryCandidate

IP_PATTERN = re.compile(r"\b\d{1,3}(?:\.\d{1,3}){3}\b", re.ASCII)
URL_PATTERN = re.compile(r"https?://[^\s<\"]+", re.IGNORECASE)
URL_PREFIX = re.compile(r"^https?://", re.IGNORECASE)
NEWLINES = re.compile(r"\n+")

LOGICAL_TREE_MARKER = "logical tree"


class CandidateKind(str, Enum):
    JSON = "json"
    TEXT = "text"
    OCTET_DUMP = "octetDump"


def _unique(values: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(values))


def extract_ips(text: str) -> List[str]:
    """All dotted-quad literals in text, first-seen order, no duplicates."""
    return _unique(IP_PATTERN.findall(text))


def first_ip(text: str) -> Optional[str]:
    match = IP_PATTERN.search(text)
    return match.group(0) if match else None


def decode_utf16_octets(octets: Sequence[int]) -> str:
    """
    Decode octets as little-endian UTF-16.

    A zero unit becomes a newline separator rather than a terminator, and a
    trailing odd byte is dropped. Surrogate pairs join into one character;
    unpaired surrogates decode to U+FFFD.
    """
    buf = bytearray()
    for i in range(0, len(octets) - 1, 2):
        lo, hi = octets[i] & 0xFF, octets[i + 1] & 0xFF
        if lo or hi:
            buf += bytes((lo, hi))
        else:
            buf += b"\n\x00"
    return buf.decode("utf-16-le", errors="replace")


def _from_json(raw: Any) -> List[DiscoveryCandidate]:
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
            return [DiscoveryCandidate(ip=ip) for ip in extract_ips(text)]
    flat = json.dumps(raw, default=str)
    return [DiscoveryCandidate(ip=ip) for ip in extract_ips(flat)]


def _from_text(raw: str) -> List[DiscoveryCandidate]:
    ips = []
    for url in URL_PATTERN.findall(raw):
        ip = first_ip(url)
        if ip:
            ips.append(ip)
    return [DiscoveryCandidate(ip=ip) for ip in _unique(ips)]


def _from_octet_dump(raw: str) -> List[DiscoveryCandidate]:
    payload = extract_tag("str", raw)
    if not payload:
        return []

    text = decode_utf16_octets(decode_hex_octets(payload))
    lines = [part.strip() for part in NEWLINES.split(text)]
    lines = [line for line in lines if line]

    pairs = []
    for i in range(len(lines) - 2):
        name, marker, url_line = lines[i], lines[i + 1], lines[i + 2]
        if marker.lower() != LOGICAL_TREE_MARKER or not URL_PREFIX.match(url_line):
            continue
        ip = first_ip(url_line)
        if ip:
            pairs.append(DiscoveryCandidate(ip=ip, name=name))
    return pairs


def extract_candidates(raw: Any, kind: str) -> List[DiscoveryCandidate]:
    """
    Recover device candidates from one probe response.

    Args:
        raw: Parsed JSON value or response text for "json", response text otherwise
        kind: "json", "text" or "octetDump"

    Returns:
        Candidates in first-seen order. Only "octetDump" yields names.
    """
    kind = CandidateKind(kind)
    if kind == CandidateKind.JSON:
        return _from_json(raw)
    if raw is None:
        return []
    raw = str(raw)
    if kind == CandidateKind.TEXT:
        return _from_text(raw)
    return _from_octet_dump(raw)


def merge_candidates(*groups: Sequence[DiscoveryCandidate]) -> List[DiscoveryCandidate]:
    """Key candidates by IP; a named sighting beats a nameless one."""
    by_ip: Dict[str, DiscoveryCandidate] = {}
    for group in groups:
        for candidate in group:
            prev = by_ip.get(candidate.ip)
            if prev is None or candidate.name is not None:
                by_ip[candidate.ip] = candidate
    return list(by_ip.values())
