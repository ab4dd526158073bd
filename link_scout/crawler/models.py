# link_scout/crawler/models.py
"""
Data models for the LinkScout crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List
from urllib.parse import urlparse


class SourceKind(str, Enum):
    """Which construct a discovered URL came from."""

    HREF = "href"
    SCRIPT = "script"
    FORM = "form"
    JS = "js"
    JS_FILE = "js-file"

    def __str__(self) -> str:
        return self.value


@dataclass(slots=True)
class PageData:
    """Holds the final URL, decoded body and metadata of a fetched page."""

    url: str
    content: str
    content_type: str = ""
    status: int = 200
    truncated: bool = False

    @property
    def is_javascript(self) -> bool:
        return urlparse(self.url).path.endswith(".js")

    @property
    def is_html(self) -> bool:
        if self.content_type:
            return "html" in self.content_type
        return not self.is_javascript


@dataclass(frozen=True, slots=True)
class LinkRecord:
    """One discovered reference: absolute URL, provenance and the page it was found on."""

    url: str
    source: SourceKind
    where: str

    def to_dict(self) -> Dict[str, str]:
        return {"Source": self.source.value, "URL": self.url, "Where": self.where}


@dataclass(slots=True)
class Extraction:
    """Records to report and URLs to follow, both in discovery order."""

    records: List[LinkRecord] = field(default_factory=list)
    follow: List[str] = field(default_factory=list)

    def add(self, url: str, source: SourceKind, where: str, *, follow: bool = False) -> None:
        self.records.append(LinkRecord(url, source, where))
        if follow:
            self.follow.append(url)


@dataclass(slots=True)
class RunSummary:
    """Counters collected by the supervisor over one run."""

    seeds_read: int = 0
    seeds_crawled: int = 0
    seeds_skipped: int = 0
    seeds_timed_out: int = 0
    records_emitted: int = 0
    records_written: int = 0
