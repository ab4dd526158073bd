"""link_scout.seeds: Чтение и проверка seed URL."""

from __future__ import annotations

import asyncio
import re
from typing import AsyncIterator, Iterable, TextIO
from urllib.parse import urlparse

from link_scout.crawler.fetcher import Fetcher
from link_scout.errors import SeedError
from link_scout.logger import logger

__all__ = ["PROBE_SCHEMES", "has_scheme", "read_seeds", "iter_seeds", "resolve_seed", "seed_hostname"]

PROBE_SCHEMES = ("http", "https")

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")


def has_scheme(raw: str) -> bool:
    return bool(_SCHEME_RE.match(raw))


def seed_hostname(url: str) -> str:
    """Host of an absolute http(s) URL, or SeedError."""
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError as exc:
        raise SeedError(url, str(exc)) from exc
    if parsed.scheme not in PROBE_SCHEMES or not host:
        raise SeedError(url, "input must be a valid absolute URL")
    return host


async def resolve_seed(raw: str, fetcher: Fetcher) -> str:
    """
    Turn an input line into an absolute seed URL.

    A line without scheme is probed as ``http://`` first, then ``https://``;
    the first scheme that gets any HTTP answer wins.
    """
    candidate = raw.strip()
    if not candidate:
        raise SeedError(raw, "empty line")
    if not has_scheme(candidate):
        for scheme in PROBE_SCHEMES:
            url = f"{scheme}://{candidate}"
            seed_hostname(url)
            if await fetcher.probe(url):
                logger.debug("Scheme probe: %s -> %s", candidate, url)
                return url
        raise SeedError(candidate, "unable to validate URL")
    seed_hostname(candidate)
    return candidate


async def read_seeds(stream: TextIO) -> AsyncIterator[str]:
    """Yield stripped non-empty lines of *stream* without blocking the event loop."""
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, stream.readline)
        if not line:
            break
        line = line.strip()
        if line:
            yield line


async def iter_seeds(lines: Iterable[str]) -> AsyncIterator[str]:
    """Async view over an in-memory list of seeds (archive results, tests)."""
    for line in lines:
        line = line.strip()
        if line:
            yield line
