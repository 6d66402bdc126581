from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pysofar._transport import HttpTransport
from pysofar.config import SofarConfig
from pysofar.exceptions import SofarTransportError

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@contextlib.asynccontextmanager
async def _serve(handler: Handler, *, request_timeout: float = 5.0) -> AsyncIterator[HttpTransport]:
    app = web.Application()
    app.router.add_post("/api/{endpoint:.*}", handler)
    async with TestServer(app) as server, aiohttp.ClientSession() as http:
        config = SofarConfig(
            username="u",
            password="p",
            base_url=str(server.make_url("/api/")),
            request_timeout=request_timeout,
            time_zone="UTC",
        )
        yield HttpTransport(config, http)


@pytest.mark.asyncio
async def test_post_json_sends_body_headers_and_params() -> None:
    async def handler(request: web.Request) -> web.Response:
        return web.json_response(
            {
                "code": "0",
                "data": {
                    "path": request.match_info["endpoint"],
                    "body": await request.json(),
                    "stationId": request.query.get("stationId"),
                    "authorization": request.headers.get("authorization"),
                },
            }
        )

    async with _serve(handler) as transport:
        body = await transport.post_json(
            "device/stationInfo/selectStationDetail",
            {"pageNum": 1},
            headers={"authorization": "token-1", "content-type": "application/json"},
            params={"stationId": "S1"},
        )

    assert body["data"] == {
        "path": "device/stationInfo/selectStationDetail",
        "body": {"pageNum": 1},
        "stationId": "S1",
        "authorization": "token-1",
    }


@pytest.mark.asyncio
async def test_non_200_status_raises_with_status_code() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.Response(status=500, text="boom")

    async with _serve(handler) as transport:
        with pytest.raises(SofarTransportError) as excinfo:
            await transport.post_json("user/auth/he/login", {}, headers={})

    assert excinfo.value.status_code == 500
    assert excinfo.value.endpoint == "user/auth/he/login"


@pytest.mark.asyncio
async def test_created_status_is_not_success() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.json_response({"code": "0"}, status=201)

    async with _serve(handler) as transport:
        with pytest.raises(SofarTransportError) as excinfo:
            await transport.post_json("user/auth/he/login", {}, headers={})

    assert excinfo.value.status_code == 201


@pytest.mark.asyncio
async def test_invalid_json_body_raises() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.Response(text="<html>maintenance</html>", content_type="text/html")

    async with _serve(handler) as transport:
        with pytest.raises(SofarTransportError, match="Invalid JSON"):
            await transport.post_json("user/auth/he/login", {}, headers={})


@pytest.mark.asyncio
async def test_json_list_body_raises() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.json_response([{"id": "S1"}])

    async with _serve(handler) as transport:
        with pytest.raises(SofarTransportError, match="not a JSON object"):
            await transport.post_json("device/stationInfo/selectStationListPages", {}, headers={})


@pytest.mark.asyncio
async def test_undecodable_body_raises_transport_error() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.Response(body=b"\xff\xfe\xfa{", content_type="application/json", charset="utf-8")

    async with _serve(handler) as transport:
        with pytest.raises(SofarTransportError, match="Undecodable"):
            await transport.post_json("user/auth/he/login", {}, headers={})


@pytest.mark.asyncio
async def test_timeout_raises_transport_error() -> None:
    async def handler(_request: web.Request) -> web.Response:
        await asyncio.sleep(0.5)
        return web.json_response({"code": "0"})

    async with _serve(handler, request_timeout=0.05) as transport:
        with pytest.raises(SofarTransportError, match="timed out") as excinfo:
            await transport.post_json("user/auth/he/login", {}, headers={})

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_connection_refused_raises_transport_error() -> None:
    config = SofarConfig(username="u", password="p", base_url="http://127.0.0.1:1/api/", time_zone="UTC")
    async with aiohttp.ClientSession() as http:
        with pytest.raises(SofarTransportError, match="failed") as excinfo:
            await HttpTransport(config, http).post_json("user/auth/he/login", {}, headers={})

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_tls_verification_toggle(caplog: pytest.LogCaptureFixture) -> None:
    async with aiohttp.ClientSession() as http:
        with caplog.at_level(logging.WARNING, logger="pysofar._transport"):
            insecure = HttpTransport(SofarConfig(username="u", password="p", time_zone="UTC"), http)
        secure = HttpTransport(SofarConfig(username="u", password="p", time_zone="UTC", verify_ssl=True), http)

    assert insecure._ssl is False
    assert secure._ssl is None
    assert [record.getMessage() for record in caplog.records] == [
        "TLS certificate validation is disabled for https://global.sofarcloud.com/api/"
    ]
