from __future__ import annotations

from collections import Counter
from collections.abc import AsyncIterator, Callable
from typing import Any, Dict, List

import pytest
from aiohttp import web
from link_scout.config import CrawlerConfig
from link_scout.crawler.models import LinkRecord, PageData
from link_scout.logger import init_logging


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


def html(body: str) -> web.Response:
    return web.Response(text=f"<html><body>{body}</body></html>", content_type="text/html")


def counting_app(routes: Dict[str, Callable[[web.Request], Any]]) -> tuple[web.Application, Counter]:
    """Build an app from ``path -> handler`` and count hits per path."""
    hits: Counter = Counter()
    app = web.Application()

    def wrap(path: str, handler):
        async def _handler(request: web.Request):
            hits[path] += 1
            return await handler(request)

        return _handler

    for path, handler in routes.items():
        app.router.add_route("*", path, wrap(path, handler))
    return app, hits


class RecordCollector:
    """Async emit callback that keeps records in arrival order."""

    def __init__(self) -> None:
        self.records: List[LinkRecord] = []

    async def __call__(self, record: LinkRecord) -> None:
        self.records.append(record)

    def pairs(self) -> List[tuple[str, str]]:
        return [(r.source.value, r.url) for r in self.records]


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI tests rebind the log handler to CliRunner streams; restore it afterwards."""
    yield
    init_logging()


@pytest.fixture()
def make_config() -> Callable[..., CrawlerConfig]:
    """Factory for CrawlerConfig with test-friendly defaults."""

    def _make(**overrides: Any) -> CrawlerConfig:
        values: Dict[str, Any] = {
            "threads": 4,
            "max_depth": 2,
            "timeout": 10,
            "request_timeout": 5.0,
            "user_agent": "TestAgent/1.0",
        }
        values.update(overrides)
        return CrawlerConfig(**values)

    return _make


@pytest.fixture()
def collector() -> RecordCollector:
    return RecordCollector()


@pytest.fixture()
def mock_page_data() -> PageData:
    """
    Provide a simple PageData instance with HTML content.
    """
    content = (
        '<html><body>'
        '<a href="/link1">L1</a><a href="http://external.com/x">X</a>'
        '<script src="/static/app.js"></script>'
        '<form action="/login"></form>'
        '</body></html>'
    )
    return PageData(url="http://example.com/", content=content, content_type="text/html")
