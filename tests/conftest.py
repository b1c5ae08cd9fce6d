"""Shared fixtures: isolated data directory and local fake servers."""

import os
import tempfile

# Point settings at a scratch directory before config is imported
_DATA_DIR = tempfile.mkdtemp(prefix="recmon-test-")
os.environ.setdefault("RECMON_DATA_DIR", _DATA_DIR)
os.environ.setdefault("RECMON_DATABASE_PATH", os.path.join(_DATA_DIR, "recmon.db"))
os.environ.setdefault("RECMON_LEGACY_CAMERAS_TXT", os.path.join(_DATA_DIR, "cameras.txt"))

import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer


@pytest_asyncio.fixture
async def serve():
    """Start aiohttp apps on local ports; each call returns host:port."""
    servers = []

    async def _serve(app: web.Application) -> str:
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return f"{server.host}:{server.port}"

    yield _serve

    for server in servers:
        await server.close()
