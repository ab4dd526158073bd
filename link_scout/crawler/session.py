# link_scout/crawler/session.py
"""
Crawl session: the depth-bounded, scope-filtered traversal of one seed URL.

A frontier queue of ``(url, depth)`` pairs is consumed by ``threads``
workers. Each fetched page goes through the link extractor; records are
emitted right away and follow candidates go back to the frontier at
``depth + 1``. A session-wide timer may close the session early: nothing
is dispatched or emitted after that, while fetches already in flight are
left to finish on their own.
"""
from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Set, Tuple

from link_scout.config import CrawlerConfig
from link_scout.crawler.fetcher import Fetcher, pick_user_agent
from link_scout.crawler.link_extractor import extract
from link_scout.crawler.models import LinkRecord, PageData
from link_scout.crawler.scope import ScopeRule
from link_scout.errors import FetchError
from link_scout.logger import logger

__all__ = ("CrawlSession", "Emit", "SessionOutcome")

Emit = Callable[[LinkRecord], Awaitable[None]]


class SessionOutcome(str, Enum):
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


class CrawlSession:
    """Traversal of a single seed. Not reusable: call :meth:`run` once."""

    def __init__(
        self,
        seed_url: str,
        scope: ScopeRule,
        config: CrawlerConfig,
        fetcher: Fetcher,
        emit: Emit,
    ) -> None:
        self.seed_url = seed_url
        self.scope = scope
        self.config = config
        self.fetcher = fetcher
        self._emit = emit
        self.user_agent = pick_user_agent(config)
        self.visited: Set[str] = set()
        self.pages_fetched = 0
        self.records_emitted = 0
        self.outcome: Optional[SessionOutcome] = None
        self._closed = False
        self._frontier: asyncio.Queue[Tuple[str, int]] = asyncio.Queue()
        self._workers: List[asyncio.Task[None]] = []
        self._busy: Set[asyncio.Task[None]] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    async def run(self) -> SessionOutcome:
        if self.outcome is not None:
            raise RuntimeError("CrawlSession.run() may only be called once")
        logger.info("Crawling %s", self.seed_url)
        start = time.monotonic()

        self._admit(self.seed_url, 0)
        self._workers = [
            asyncio.create_task(self._worker()) for _ in range(self.config.threads)
        ]
        drained = asyncio.create_task(self._frontier.join())
        done, _ = await asyncio.wait({drained}, timeout=self.config.session_timeout)

        if drained in done:
            self.outcome = SessionOutcome.COMPLETED
        else:
            drained.cancel()
            self.outcome = SessionOutcome.TIMED_OUT
            logger.warning("[timeout] %s", self.seed_url)
        idle = self._close()
        await asyncio.gather(*idle, return_exceptions=True)

        duration = time.monotonic() - start
        logger.info(
            "Finished %s: %s, %d pages, %d records in %.2f s",
            self.seed_url, self.outcome.value, self.pages_fetched, self.records_emitted, duration,
        )
        return self.outcome

    async def abandon(self) -> None:
        """Cancel whatever is still running after a timeout and wait for it."""
        self._close()
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)

    @property
    def pending(self) -> bool:
        """True while fetches started before a timeout are still running."""
        return any(not w.done() for w in self._workers)

    def _close(self) -> List[asyncio.Task[None]]:
        self._closed = True
        # idle workers wait on the frontier; busy ones stop after their fetch
        idle = [w for w in self._workers if w not in self._busy and not w.done()]
        for worker in idle:
            worker.cancel()
        return idle

    def _admit(self, url: str, depth: int) -> bool:
        if self._closed or depth > self.config.max_depth:
            return False
        if url in self.visited or not self.scope.allows(url):
            return False
        self.visited.add(url)
        self._frontier.put_nowait((url, depth))
        return True

    async def _worker(self) -> None:
        task = asyncio.current_task()
        while not self._closed:
            url, depth = await self._frontier.get()
            if task is not None:
                self._busy.add(task)
            try:
                if not self._closed:
                    await self._visit(url, depth)
            except FetchError as exc:
                logger.debug("%s", exc)
            except Exception:
                logger.exception("Unexpected error while processing %s", url)
            finally:
                self._busy.discard(task)
                self._frontier.task_done()

    async def _visit(self, url: str, depth: int) -> None:
        page = await self.fetcher.fetch(
            url, headers=self._request_headers(), accept_redirect=self._accept_redirect
        )
        if self._closed:
            return
        self.pages_fetched += 1
        logger.debug("Fetched %s (HTTP %d, %s)", page.url, page.status, page.content_type or "no type")
        if page.truncated:
            logger.debug("Body of %s truncated to %s bytes", page.url, self.config.max_body_size)
        await self._process(page, depth)

    def _accept_redirect(self, target: str) -> bool:
        """Redirect targets obey the same rules as links: in scope and not seen yet."""
        if self._closed:
            return False
        if not self.scope.allows(target):
            logger.debug("Redirect out of scope: %s", target)
            return False
        if target in self.visited:
            logger.debug("Redirect to visited page: %s", target)
            return False
        self.visited.add(target)
        return True

    async def _process(self, page: PageData, depth: int) -> None:
        extraction = extract(
            page, self.seed_url, inside=self.config.inside, crawl_js=self.config.crawl_js
        )
        for record in extraction.records:
            if self._closed:
                return
            await self._emit(record)
            self.records_emitted += 1
        for candidate in extraction.follow:
            self._admit(candidate, depth + 1)

    def _request_headers(self) -> dict[str, str]:
        if any(name.lower() == "user-agent" for name in self.config.headers):
            return {}
        return {"User-Agent": self.user_agent}
