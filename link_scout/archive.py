"""link_scout.archive: Получение исторических URL хоста из Wayback Machine.

The CDX index answers with one whitespace separated line per capture
(``urlkey timestamp original mimetype statuscode digest length``). The
``original`` column is spooled into a scratch file and read back as seeds.
"""
from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path
from typing import List, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from link_scout.errors import ArchiveError
from link_scout.logger import logger
from link_scout.seeds import has_scheme

__all__ = ["CDX_ENDPOINT", "WaybackArchive", "parse_cdx_line"]

CDX_ENDPOINT = "http://web.archive.org/cdx/search/cdx"


def parse_cdx_line(line: str) -> Optional[str]:
    """Return the archived URL of one CDX line, ``http://``-prefixed when it has no scheme."""
    fields = line.split()
    if len(fields) < 3:
        return None
    original = fields[2]
    return original if has_scheme(original) else f"http://{original}"


class WaybackArchive:
    """Looks up successfully archived URLs under a hostname."""

    def __init__(
        self,
        session: Optional[ClientSession] = None,
        *,
        endpoint: str = CDX_ENDPOINT,
        proxy: Optional[str] = None,
        timeout: float = 60.0,
    ) -> None:
        self.session = session
        self.endpoint = endpoint
        self.proxy = proxy
        self.timeout = timeout

    def _params(self, hostname: str) -> dict[str, str]:
        return {
            "url": f"*.{hostname}",
            "collapse": "urlkey",
            "filter": "statuscode:200",
        }

    async def fetch_urls(self, hostname: str) -> List[str]:
        """Return archived URLs for *hostname*; any network or file failure is ArchiveError."""
        logger.info("Querying web archive for %s", hostname)
        try:
            with tempfile.TemporaryDirectory(prefix="link_scout_") as scratch:
                spool = Path(scratch) / "wayback_urls.txt"
                await self._download(hostname, spool)
                urls = spool.read_text(encoding="utf-8").splitlines()
        except (ClientError, asyncio.TimeoutError, OSError) as exc:
            raise ArchiveError(hostname, exc) from exc
        logger.info("Web archive returned %d URLs for %s", len(urls), hostname)
        return urls

    async def _download(self, hostname: str, spool: Path) -> None:
        own_session = self.session is None
        session = self.session or ClientSession(timeout=ClientTimeout(total=self.timeout))
        try:
            async with session.get(
                self.endpoint, params=self._params(hostname), proxy=self.proxy
            ) as resp:
                resp.raise_for_status()
                with spool.open("w", encoding="utf-8") as fh:
                    async for raw in resp.content:
                        url = parse_cdx_line(raw.decode("utf-8", errors="replace"))
                        if url:
                            fh.write(url + "\n")
        finally:
            if own_session:
                await session.close()
