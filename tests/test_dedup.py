from concurrent.futures import ThreadPoolExecutor

from link_scout.dedup import Deduplicator


def test_first_seen_only_once():
    dedup = Deduplicator()
    assert dedup.is_first_seen("http://example.com/a")
    assert not dedup.is_first_seen("http://example.com/a")
    assert not dedup.is_first_seen("http://example.com/a")
    assert dedup.is_first_seen("http://example.com/b")
    assert len(dedup) == 2
    assert "http://example.com/a" in dedup


def test_exact_string_match():
    dedup = Deduplicator()
    assert dedup.is_first_seen("http://example.com/a")
    assert dedup.is_first_seen("http://example.com/a/")
    assert dedup.is_first_seen("HTTP://example.com/a")


def test_concurrent_callers_race_on_same_url():
    dedup = Deduplicator()
    urls = [f"http://example.com/{i % 10}" for i in range(2000)]
    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(dedup.is_first_seen, urls))
    assert sum(results) == 10
    assert len(dedup) == 10
