# link_scout/crawler/link_extractor.py
"""
Link extraction for LinkScout: turns a fetched page into LinkRecords.

Records are reported for every anchor, script and form found; only some of
them are returned as candidates to follow. Scope and depth are the
session's business, not the extractor's.
"""
from __future__ import annotations

import re
from typing import Iterator, Optional, Tuple
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag
from link_scout.crawler.models import Extraction, PageData, SourceKind

__all__ = ("JS_URL_RE", "absolute_url", "extract", "extract_html", "extract_js")

#: Bare-URL heuristic for JavaScript bodies; not a JS-aware parser.
JS_URL_RE = re.compile(r"https?://[^\s'\"<>]+")

# (selector tag, attribute, provenance) in emission order
_HTML_SOURCES: Tuple[Tuple[str, str, SourceKind], ...] = (
    ("a", "href", SourceKind.HREF),
    ("script", "src", SourceKind.SCRIPT),
    ("form", "action", SourceKind.FORM),
)


def absolute_url(base: str, ref: str) -> Optional[str]:
    """
    Resolve *ref* against *base*, dropping the fragment.

    Returns None for in-page anchors (``#top``) and unresolvable references.
    """
    ref = ref.strip()
    if ref.startswith("#"):
        return None
    try:
        joined = urljoin(base, ref)
    except ValueError:
        return None
    url, _ = urldefrag(joined)
    if not urlparse(url).scheme:
        return None
    return url


def _base_href(soup: BeautifulSoup, page_url: str) -> str:
    base = soup.find("base", href=True)
    if isinstance(base, Tag):
        href = base.get("href")
        if isinstance(href, str):
            return absolute_url(page_url, href) or page_url
    return page_url


def _attribute_values(soup: BeautifulSoup, tag: str, attr: str) -> Iterator[str]:
    for node in soup.find_all(tag):
        if not isinstance(node, Tag):
            continue
        value = node.get(attr)
        if isinstance(value, str):
            yield value


def extract_html(
    page: PageData, seed_url: str, extraction: Extraction, *, inside: bool, crawl_js: bool
) -> None:
    """Collect href, script and form records, in that order, from an HTML page."""
    soup = BeautifulSoup(page.content, "html.parser")
    base = _base_href(soup, page.url)
    for tag, attr, source in _HTML_SOURCES:
        for raw in _attribute_values(soup, tag, attr):
            url = absolute_url(base, raw)
            if url is None:
                continue
            if source is SourceKind.HREF:
                follow = not inside or seed_url in url
            elif source is SourceKind.SCRIPT:
                follow = crawl_js
            else:
                follow = False
            extraction.add(url, source, page.url, follow=follow)


def extract_js(page: PageData, extraction: Extraction) -> None:
    """Scan a JavaScript body for same-host URLs, then report the file itself."""
    host = urlparse(page.url).hostname
    for match in JS_URL_RE.findall(page.content):
        url = absolute_url(page.url, match)
        if url is not None and urlparse(url).hostname == host:
            extraction.add(url, SourceKind.JS, page.url)
    extraction.add(page.url, SourceKind.JS_FILE, page.url)


def extract(page: PageData, seed_url: str, *, inside: bool = False, crawl_js: bool = False) -> Extraction:
    """
    Produce the records and follow candidates for one fetched page.

    The result depends only on the arguments, so reprocessing the same page
    yields the same ordered records.
    """
    extraction = Extraction()
    if page.is_html and not page.is_javascript:
        extract_html(page, seed_url, extraction, inside=inside, crawl_js=crawl_js)
    if crawl_js and page.is_javascript:
        extract_js(page, extraction)
    return extraction
