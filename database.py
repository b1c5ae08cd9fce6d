"""Device registry persistence using SQLite."""

import aiosqlite
import logging
import re
from pathlib import Path
from typing import List, Optional

from config import settings
from core.registry import Device

logger = logging.getLogger(__name__)

QUOTED_LINE = re.compile(r'^\s*"([^"]+)"\s*,\s*([^,]+)\s*$')


def parse_registry_line(line: str) -> Optional[Device]:
    """
    Parse one line of a legacy cameras.txt.

    Accepts `"name",ip`, `name,ip` or a bare `ip`. Blank lines give None.
    """
    text = line.strip()
    if not text:
        return None

    match = QUOTED_LINE.match(text)
    if match:
        return Device(ip=match.group(2).strip(), name=match.group(1).strip())

    parts = [p.strip() for p in text.split(",")]
    if len(parts) >= 2:
        return Device(ip=parts[1], name=parts[0] or None)
    return Device(ip=parts[0])


def read_registry_text(path: Path) -> List[Device]:
    """Read a legacy cameras.txt, deduplicated by IP (last line wins)."""
    if not path.exists():
        return []
    by_ip = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        device = parse_registry_line(line)
        if device and device.ip:
            by_ip[device.ip] = device
    return list(by_ip.values())


class Database:
    """Async SQLite store for the device set."""

    def __init__(self, db_path: Path = None):
        self.db_path = db_path or settings.database_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def connect(self):
        """Connect to database."""
        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row
        await self._create_tables()

    async def close(self):
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _create_tables(self):
        """Create database tables if they don't exist."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS devices (
                ip TEXT PRIMARY KEY,
                name TEXT,
                position INTEGER NOT NULL
            )
        """)
        await self._connection.commit()

    async def load(self) -> List[Device]:
        """Return the stored devices in insertion order."""
        cursor = await self._connection.execute(
            "SELECT ip, name FROM devices ORDER BY position"
        )
        rows = await cursor.fetchall()
        return [Device(ip=row["ip"], name=row["name"]) for row in rows]

    async def save(self, devices: List[Device]):
        """Replace the stored set. The most recent save wins."""
        try:
            await self._connection.execute("DELETE FROM devices")
            await self._connection.executemany(
                "INSERT INTO devices (ip, name, position) VALUES (?, ?, ?)",
                [(d.ip, d.name, i) for i, d in enumerate(devices)]
            )
            await self._connection.commit()
        except Exception:
            await self._connection.rollback()
            raise

    async def import_legacy_text(self, path: Path) -> int:
        """Seed an empty table from a legacy cameras.txt. Returns rows imported."""
        cursor = await self._connection.execute("SELECT COUNT(*) FROM devices")
        row = await cursor.fetchone()
        if row[0]:
            return 0

        devices = read_registry_text(path)
        if devices:
            await self.save(devices)
            logger.info(f"Imported {len(devices)} devices from {path}")
        return len(devices)


# Global instance
db = Database()
