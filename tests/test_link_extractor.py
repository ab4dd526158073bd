"""Тесты для адаптера извлечения ссылок (link_scout.crawler.link_extractor)."""
import pytest
from link_scout.crawler.link_extractor import JS_URL_RE, absolute_url, extract
from link_scout.crawler.models import PageData, SourceKind


def test_records_order_and_provenance(mock_page_data):
    extraction = extract(mock_page_data, "http://example.com/")
    assert [(r.source, r.url) for r in extraction.records] == [
        (SourceKind.HREF, "http://example.com/link1"),
        (SourceKind.HREF, "http://external.com/x"),
        (SourceKind.SCRIPT, "http://example.com/static/app.js"),
        (SourceKind.FORM, "http://example.com/login"),
    ]
    assert {r.where for r in extraction.records} == {"http://example.com/"}


def test_follow_candidates_without_js(mock_page_data):
    extraction = extract(mock_page_data, "http://example.com/")
    # scripts are not followed unless JS crawling is on; forms never are
    assert extraction.follow == ["http://example.com/link1", "http://external.com/x"]


def test_follow_candidates_with_js(mock_page_data):
    extraction = extract(mock_page_data, "http://example.com/", crawl_js=True)
    assert "http://example.com/static/app.js" in extraction.follow
    assert "http://example.com/login" not in extraction.follow


def test_grouped_by_kind_not_document_order():
    page = PageData(
        url="http://example.com/",
        content='<form action="/f"></form><script src="/s.js"></script><a href="/a">a</a>',
        content_type="text/html",
    )
    assert [r.source for r in extract(page, "http://example.com/").records] == [
        SourceKind.HREF, SourceKind.SCRIPT, SourceKind.FORM,
    ]


def test_inside_only_gates_follow_not_records():
    page = PageData(
        url="http://example.com/blog",
        content='<a href="http://example.com/other">o</a><a href="/blog/post">p</a>',
        content_type="text/html",
    )
    extraction = extract(page, "http://example.com/blog", inside=True)
    assert [r.url for r in extraction.records] == [
        "http://example.com/other",
        "http://example.com/blog/post",
    ]
    assert extraction.follow == ["http://example.com/blog/post"]


def test_relative_resolution_and_base_href():
    page = PageData(
        url="http://example.com/dir/page.html",
        content='<head><base href="http://cdn.example.com/root/"></head>'
                '<a href="rel">r</a><a href="#top">t</a><a href="/abs#frag">f</a>',
        content_type="text/html",
    )
    urls = [r.url for r in extract(page, "http://example.com/").records]
    assert urls == ["http://cdn.example.com/root/rel", "http://cdn.example.com/abs"]


def test_non_html_page_yields_nothing():
    page = PageData(url="http://example.com/data", content='<a href="/x">x</a>', content_type="application/json")
    assert extract(page, "http://example.com/").records == []


JS_BODY = """
var api = "http://example.com/api/v1";
fetch('https://example.com/data.json?x=1');
var other = "http://other.org/lib.js";
var tpl = `<a href="http://example.com/tpl">`;
"""


def test_js_scan_same_host_then_js_file():
    page = PageData(url="http://example.com/static/app.js", content=JS_BODY, content_type="application/javascript")
    extraction = extract(page, "http://example.com/", crawl_js=True)
    assert [(r.source, r.url) for r in extraction.records] == [
        (SourceKind.JS, "http://example.com/api/v1"),
        (SourceKind.JS, "https://example.com/data.json?x=1"),
        (SourceKind.JS, "http://example.com/tpl"),
        (SourceKind.JS_FILE, "http://example.com/static/app.js"),
    ]
    assert extraction.follow == []


def test_js_file_reported_even_without_matches():
    page = PageData(url="http://example.com/empty.js", content="var a = 1;", content_type="text/javascript")
    records = extract(page, "http://example.com/", crawl_js=True).records
    assert [(r.source, r.url, r.where) for r in records] == [
        (SourceKind.JS_FILE, "http://example.com/empty.js", "http://example.com/empty.js")
    ]


def test_js_scan_disabled():
    page = PageData(url="http://example.com/app.js", content=JS_BODY, content_type="application/javascript")
    assert extract(page, "http://example.com/").records == []


def test_extraction_is_idempotent(mock_page_data):
    first = extract(mock_page_data, "http://example.com/", crawl_js=True)
    second = extract(mock_page_data, "http://example.com/", crawl_js=True)
    assert first.records == second.records
    assert first.follow == second.follow


@pytest.mark.parametrize(
    "ref,expected",
    [
        ("/a", "http://example.com/a"),
        ("b?c=1#d", "http://example.com/dir/b?c=1"),
        ("#only", None),
        ("//cdn.net/x", "http://cdn.net/x"),
        ("mailto:me@example.com", "mailto:me@example.com"),
    ],
)
def test_absolute_url(ref, expected):
    assert absolute_url("http://example.com/dir/page", ref) == expected


def test_js_url_pattern_stops_at_quotes_and_brackets():
    assert JS_URL_RE.findall("x='http://a.com/p'<http://b.com/q>\"https://c.com/r\" ") == [
        "http://a.com/p",
        "http://b.com/q",
        "https://c.com/r",
    ]
