import threading

import pytest

from pestscan.cache import DISABLE_CACHE_ENV_VAR, SummaryCache, is_cache_disabled


@pytest.fixture
def records(make_record):
    return [make_record('a', count=12, province='Cebu'), make_record('b', count=1, province='Leyte')]


def test_hit_returns_same_summary(records):
    cache = SummaryCache(maxsize=4)
    first = cache.get_summary('v1', records)
    second = cache.get_summary('v1', records)
    assert first is second
    stats = cache.get_stats()
    assert (stats['hits'], stats['misses'], stats['size']) == (1, 1, 1)
    assert stats['hit_rate'] == 50.0


def test_top_n_is_part_of_the_key(records):
    cache = SummaryCache()
    assert len(cache.get_summary('v1', records, top_n=1).top_regions) == 1
    assert len(cache.get_summary('v1', records, top_n=5).top_regions) == 2


def test_lru_eviction(records):
    cache = SummaryCache(maxsize=2)
    cache.get_summary('v1', records)
    cache.get_summary('v2', records)
    cache.get_summary('v1', records)  # v1 becomes most recent
    cache.get_summary('v3', records)
    cache.get_summary('v1', records)
    assert cache.get_stats()['size'] == 2
    misses = cache.get_stats()['misses']
    cache.get_summary('v2', records)
    assert cache.get_stats()['misses'] == misses + 1


def test_invalidate(records):
    cache = SummaryCache()
    cache.get_summary('v1', records)
    cache.get_summary('v1', records, top_n=1)
    cache.get_summary('v2', records)
    cache.invalidate('v1')
    assert cache.get_stats()['size'] == 1
    cache.invalidate()
    assert cache.get_stats()['size'] == 0


def test_invalid_maxsize():
    with pytest.raises(ValueError):
        SummaryCache(maxsize=0)


def test_disabled_by_environment(monkeypatch, records):
    monkeypatch.setenv(DISABLE_CACHE_ENV_VAR, 'true')
    assert is_cache_disabled()
    cache = SummaryCache()
    first = cache.get_summary('v1', records)
    second = cache.get_summary('v1', records)
    assert first == second
    assert first is not second
    assert cache.get_stats()['size'] == 0


def test_concurrent_access(records):
    cache = SummaryCache(maxsize=8)
    results = []

    def worker(n):
        for i in range(20):
            results.append(cache.get_summary(f'v{(n + i) % 4}', records).total)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == [2] * 80
    stats = cache.get_stats()
    assert stats['hits'] + stats['misses'] == 80
    assert stats['size'] == 4
