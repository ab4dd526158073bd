import json

from link_scout.config import CrawlerConfig
from link_scout.crawler.models import LinkRecord, SourceKind
from link_scout.report import RecordFormatter, format_json, format_plain

RECORD = LinkRecord("http://example.com/a", SourceKind.HREF, "http://example.com/")


def test_plain_variants():
    assert format_plain(RECORD) == "http://example.com/a"
    assert format_plain(RECORD, show_source=True) == "http://example.com/a [source: href]"
    assert format_plain(RECORD, show_where=True) == "http://example.com/a [from: http://example.com/]"
    assert (
        format_plain(RECORD, True, True)
        == "http://example.com/a [source: href] [from: http://example.com/]"
    )


def test_json_record():
    line = format_json(LinkRecord("http://example.com/x.js", SourceKind.JS_FILE, "http://example.com/x.js"))
    assert "\n" not in line
    assert json.loads(line) == {
        "Source": "js-file",
        "URL": "http://example.com/x.js",
        "Where": "http://example.com/x.js",
    }


def test_formatter_from_config():
    fmt = RecordFormatter.from_config(CrawlerConfig(output_format="json", show_source=True))
    assert json.loads(fmt(RECORD))["Source"] == "href"
    fmt = RecordFormatter.from_config(CrawlerConfig(show_where=True))
    assert fmt(RECORD).endswith("[from: http://example.com/]")
