# link_scout/crawler/fetcher.py
"""
Fetcher module: HTTP transport for LinkScout (headers, proxy, TLS, redirects, body cap).
"""
from __future__ import annotations

import asyncio
import random
from typing import Callable, Mapping, Optional, Sequence
from urllib.parse import urljoin

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout, TCPConnector
from link_scout.config import CrawlerConfig
from link_scout.crawler.models import PageData
from link_scout.errors import FetchError

__all__ = ("USER_AGENTS", "Fetcher", "pick_user_agent")

USER_AGENTS: Sequence[str] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.3",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/51.0.2704.103 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_11_5) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/50.0.2661.102 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:54.0) Gecko/20100101 Firefox/54.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:80.0) Gecko/20100101 Firefox/80.0",
)

_CHUNK_SIZE = 64 * 1024
MAX_REDIRECTS = 10
_REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


def pick_user_agent(config: CrawlerConfig) -> str:
    """Configured User-Agent, or a random browser one."""
    return config.user_agent or random.choice(USER_AGENTS)


class Fetcher:
    """Handles HTTP fetching for every session of a run over one ClientSession."""

    def __init__(self, config: CrawlerConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.request_timeout),
                connector=TCPConnector(ssl=not self.config.insecure),
                headers=dict(self.config.headers),
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _session(self) -> ClientSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    async def fetch(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        accept_redirect: Optional[Callable[[str], bool]] = None,
    ) -> PageData:
        """
        GET *url* and return the decoded page.

        Redirects are followed hop by hop (at most ``MAX_REDIRECTS``); each
        target is offered to *accept_redirect* first, and a refused target is
        never requested. Raises FetchError on transport failures, refused or
        excessive redirects and non-2xx answers. With redirects disabled a
        3xx answer is final and therefore also non-2xx.
        """
        follow = not self.config.disable_redirects
        target = url
        try:
            for _ in range(MAX_REDIRECTS + 1):
                async with self._session().get(
                    target, headers=headers, proxy=self.config.proxy, allow_redirects=False
                ) as resp:
                    location = resp.headers.get("Location")
                    if follow and resp.status in _REDIRECT_STATUSES and location:
                        target = urljoin(str(resp.url), location)
                        if accept_redirect is not None and not accept_redirect(target):
                            raise FetchError(url, reason=f"redirect to {target} refused")
                        continue
                    if not 200 <= resp.status < 300:
                        raise FetchError(url, status=resp.status)
                    body, truncated = await self._read_body(resp)
                    ctype = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                    return PageData(
                        url=str(resp.url),
                        content=self._decode(body, resp.charset),
                        content_type=ctype,
                        status=resp.status,
                        truncated=truncated,
                    )
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise FetchError(url, exc) from exc
        raise FetchError(url, reason=f"more than {MAX_REDIRECTS} redirects")

    async def probe(self, url: str) -> bool:
        """Lightweight reachability check: any HTTP answer counts, only transport errors fail."""
        try:
            async with self._session().head(
                url, proxy=self.config.proxy, allow_redirects=False
            ):
                return True
        except (ClientError, asyncio.TimeoutError, ValueError):
            return False

    async def _read_body(self, resp: ClientResponse) -> tuple[bytes, bool]:
        cap = self.config.max_body_size
        if cap is None:
            return await resp.read(), False
        buf = bytearray()
        async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
            buf.extend(chunk)
            if len(buf) >= cap:
                return bytes(buf[:cap]), len(buf) > cap or not resp.content.at_eof()
        return bytes(buf), False

    @staticmethod
    def _decode(body: bytes, charset: Optional[str]) -> str:
        try:
            return body.decode(charset or "utf-8", errors="replace")
        except LookupError:
            return body.decode("utf-8", errors="replace")
