"""Tests for the status client against a local fake device."""

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import unused_port

from core.status_client import DeviceStatus, build_status_url, query_device
from payloads import rcp_reply


def device_app(handler) -> web.Application:
    app = web.Application()
    app.router.add_get("/rcp.xml", handler)
    return app


def test_build_status_url():
    assert build_status_url("10.0.0.1", channel=2) == (
        "http://10.0.0.1/rcp.xml?command=0x0aae&type=P_OCTET&direction=READ&num=2"
    )
    assert build_status_url("10.0.0.1", secure=True).startswith("https://10.0.0.1/")


@pytest.mark.asyncio
async def test_success(serve):
    seen = {}

    async def handler(request):
        seen["query"] = dict(request.query)
        seen["auth"] = request.headers.get("Authorization")
        return web.Response(text=rcp_reply("04 01 02 03"), content_type="text/xml")

    host = await serve(device_app(handler))
    status = await query_device(host, "service", "secret", channel=3, timeout=2, name="Gate")

    assert status.name == "Gate"
    assert status.state_code == 4
    assert status.state == "ALARM RECORDING"
    assert (status.rec_preset, status.enc_preset, status.flags) == (1, 2, 3)
    assert status.http_status == 200
    assert status.error is None
    assert status.source_url == f"http://{host}/rcp.xml?command=0x0aae&type=P_OCTET&direction=READ&num=3"
    assert seen["query"]["command"] == "0x0aae"
    assert seen["query"]["num"] == "3"
    assert seen["auth"].startswith("Basic ")


@pytest.mark.asyncio
async def test_decode_failure_keeps_http_status(serve):
    async def handler(request):
        return web.Response(status=401, text="<html>Unauthorized</html>")

    host = await serve(device_app(handler))
    status = await query_device(host, "u", "p", timeout=2)

    assert status.http_status == 401
    assert status.error == "no <str>"
    assert status.state is None
    assert status.state_code is None
    assert status.source_url is not None


@pytest.mark.asyncio
async def test_device_err_reported(serve):
    async def handler(request):
        return web.Response(text=rcp_reply(err="0x40"))

    host = await serve(device_app(handler))
    status = await query_device(host, "u", "p", timeout=2)

    assert status.error == "0x40"
    assert status.http_status == 200


@pytest.mark.asyncio
async def test_timeout(serve):
    async def handler(request):
        await asyncio.sleep(2)
        return web.Response(text=rcp_reply("04"))

    host = await serve(device_app(handler))
    status = await query_device(host, "u", "p", timeout=0.2)

    assert status == DeviceStatus(ip=host, error="timeout")


@pytest.mark.asyncio
async def test_connection_refused():
    host = f"127.0.0.1:{unused_port()}"
    status = await query_device(host, "u", "p", timeout=2)

    assert status.error
    assert status.error != "timeout"
    assert status.http_status is None
    assert status.state is None


def test_api_rendering():
    status = DeviceStatus(ip="10.0.0.1", name="A", state_code=2, state="STAND BY", http_status=200)
    assert status.to_api() == {
        "name": "A",
        "ip": "10.0.0.1",
        "stateCode": 2,
        "state": "STAND BY",
        "recPreset": None,
        "encPreset": None,
        "flags": None,
        "http": 200,
        "err": None,
        "url": None,
    }
