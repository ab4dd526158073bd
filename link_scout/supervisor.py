# File: link_scout/supervisor.py
"""link_scout.supervisor: Оркестрация запуска: seed URL по очереди и один общий поток вывода.

Seeds are crawled strictly one after another; only the fetches inside a
session run concurrently. Every session pushes its records onto one
bounded queue which a single consumer drains (optional dedup, formatting,
sink) while crawling goes on, so output is streamed as it is found.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterable, Callable, List, Optional

from link_scout.archive import WaybackArchive
from link_scout.config import CrawlerConfig
from link_scout.crawler.fetcher import Fetcher
from link_scout.crawler.models import LinkRecord, RunSummary
from link_scout.crawler.scope import resolve_scope
from link_scout.crawler.session import CrawlSession, SessionOutcome
from link_scout.dedup import Deduplicator
from link_scout.errors import SeedError
from link_scout.logger import logger
from link_scout.report import RecordFormatter
from link_scout.seeds import resolve_seed, seed_hostname

__all__ = ["CrawlSupervisor", "Sink"]

Sink = Callable[[str], None]


class CrawlSupervisor:
    """Reads seeds, runs one CrawlSession per seed and fans records into the sink."""

    def __init__(
        self,
        config: CrawlerConfig,
        sink: Sink,
        *,
        fetcher: Optional[Fetcher] = None,
        archive: Optional[WaybackArchive] = None,
        deduplicator: Optional[Deduplicator] = None,
        formatter: Optional[RecordFormatter] = None,
    ) -> None:
        self.config = config
        self.sink = sink
        self.fetcher = fetcher or Fetcher(config)
        self.archive = archive
        if deduplicator is None and config.unique:
            deduplicator = Deduplicator()
        self.deduplicator = deduplicator
        self.formatter = formatter or RecordFormatter.from_config(config)
        self.summary = RunSummary()
        self._output: Optional[asyncio.Queue[Optional[LinkRecord]]] = None
        self._consumer: Optional[asyncio.Task[None]] = None
        self._stragglers: List[CrawlSession] = []

    async def run(self, seeds: AsyncIterable[str]) -> RunSummary:
        """Crawl every seed of *seeds* and return the run counters once output is flushed."""
        self._output = asyncio.Queue(maxsize=self.config.threads)
        self._consumer = asyncio.create_task(self._consume(self._output))
        try:
            async with self.fetcher:
                try:
                    async for raw in seeds:
                        self.summary.seeds_read += 1
                        await self._crawl(raw)
                finally:
                    await self._abandon_stragglers()
        finally:
            await self._close_output()
        logger.info(
            "Run finished: %d seeds read, %d crawled, %d skipped, %d timed out, %d records written",
            self.summary.seeds_read, self.summary.seeds_crawled, self.summary.seeds_skipped,
            self.summary.seeds_timed_out, self.summary.records_written,
        )
        return self.summary

    async def _crawl(self, raw: str) -> None:
        seed = await self._validate(raw)
        if seed is None:
            return
        if self.config.wayback:
            await self._crawl_archived(seed)
        await self._run_session(seed)

    async def _crawl_archived(self, seed: str) -> None:
        if self.archive is None:
            self.archive = WaybackArchive(proxy=self.config.proxy)
        # ArchiveError is fatal: the feature was requested explicitly
        for archived in await self.archive.fetch_urls(seed_hostname(seed)):
            url = await self._validate(archived)
            if url is not None:
                await self._run_session(url)

    async def _validate(self, raw: str) -> Optional[str]:
        try:
            return await resolve_seed(raw, self.fetcher)
        except SeedError as exc:
            logger.warning("[invalid url] %s: %s. Skipping...", exc.seed, exc.reason)
            self.summary.seeds_skipped += 1
            return None

    async def _run_session(self, seed: str) -> SessionOutcome:
        scope = resolve_scope(seed_hostname(seed), self.config.subs, self.config.host_override)
        session = CrawlSession(seed, scope, self.config, self.fetcher, self._emit)
        outcome = await session.run()
        self.summary.seeds_crawled += 1
        if outcome is SessionOutcome.TIMED_OUT:
            self.summary.seeds_timed_out += 1
            if session.pending:
                self._stragglers.append(session)
        return outcome

    async def _emit(self, record: LinkRecord) -> None:
        if self._output is None or self._consumer is None:
            raise RuntimeError("CrawlSupervisor.run() is not active")
        if self._consumer.done():
            # surface the sink failure instead of blocking on a dead consumer
            self._consumer.result()
            raise RuntimeError("output consumer stopped early")
        await self._output.put(record)
        self.summary.records_emitted += 1

    async def _consume(self, output: asyncio.Queue[Optional[LinkRecord]]) -> None:
        while True:
            record = await output.get()
            if record is None:
                break
            if self.deduplicator is not None and not self.deduplicator.is_first_seen(record.url):
                continue
            self.sink(self.formatter(record))
            self.summary.records_written += 1

    async def _close_output(self) -> None:
        if self._output is None or self._consumer is None:
            return
        if not self._consumer.done():
            await self._output.put(None)
        await self._consumer

    async def _abandon_stragglers(self) -> None:
        for session in self._stragglers:
            await session.abandon()
        self._stragglers.clear()
