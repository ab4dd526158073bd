from __future__ import annotations

import pytest
from aiohttp import web
from conftest import serve_app
from link_scout.archive import WaybackArchive, parse_cdx_line
from link_scout.errors import ArchiveError

CDX_BODY = (
    "com,example)/ 20200101000000 http://example.com/ text/html 200 AAAA 1234\n"
    "com,example)/login 20200101000000 https://example.com/login text/html 200 BBBB 99\n"
    "com,example,blog)/post 20210101000000 blog.example.com:80/post text/html 200 CCCC 10\n"
    "garbage\n"
)


@pytest.mark.parametrize(
    "line,expected",
    [
        ("k 1 http://example.com/a text/html 200 d 1", "http://example.com/a"),
        ("k 1 example.com/a text/html 200 d 1", "http://example.com/a"),
        ("k 1", None),
        ("", None),
    ],
)
def test_parse_cdx_line(line, expected):
    assert parse_cdx_line(line) == expected


@pytest.mark.asyncio()
async def test_fetch_urls(unused_tcp_port: int):
    received = {}

    async def cdx(request: web.Request):
        received.update(request.query)
        return web.Response(text=CDX_BODY, content_type="text/plain")

    app = web.Application()
    app.router.add_get("/cdx/search/cdx", cdx)
    async for base in serve_app(app, unused_tcp_port):
        archive = WaybackArchive(endpoint=f"{base}/cdx/search/cdx")
        urls = await archive.fetch_urls("example.com")

    assert received == {"url": "*.example.com", "collapse": "urlkey", "filter": "statuscode:200"}
    assert urls == [
        "http://example.com/",
        "https://example.com/login",
        "http://blog.example.com:80/post",
    ]


@pytest.mark.asyncio()
async def test_fetch_urls_http_error(unused_tcp_port: int):
    async def cdx(_):
        return web.Response(status=503)

    app = web.Application()
    app.router.add_get("/cdx", cdx)
    async for base in serve_app(app, unused_tcp_port):
        archive = WaybackArchive(endpoint=f"{base}/cdx")
        with pytest.raises(ArchiveError) as excinfo:
            await archive.fetch_urls("example.com")

    assert excinfo.value.hostname == "example.com"


@pytest.mark.asyncio()
async def test_fetch_urls_unreachable(unused_tcp_port: int):
    archive = WaybackArchive(endpoint=f"http://127.0.0.1:{unused_tcp_port}/cdx", timeout=5)
    with pytest.raises(ArchiveError):
        await archive.fetch_urls("example.com")
