"""
Tests for the in-process content cache.
"""

import threading

import pytest

from blog.cache import ContentCache


class TestContentCache:
    """Tests for ContentCache memoization"""

    def test_computes_once_then_serves_cached_value(self):
        """Second call for a key returns the memoized value without recomputing"""
        cache = ContentCache('test')
        calls = []

        def compute():
            calls.append(1)
            return {'page': 0}

        first = cache.get_or_compute(0, compute)
        second = cache.get_or_compute(0, compute)

        assert first is second
        assert len(calls) == 1
        assert 0 in cache
        assert len(cache) == 1

    def test_keys_are_independent(self):
        cache = ContentCache('test')
        assert cache.get_or_compute('a', lambda: 1) == 1
        assert cache.get_or_compute('b', lambda: 2) == 2
        assert cache.get('a') == 1
        assert cache.get('missing', 'default') == 'default'

    def test_store_if_false_returns_value_without_caching(self):
        """Values rejected by store_if are recomputed on the next call"""
        cache = ContentCache('test')
        calls = []

        def compute():
            calls.append(1)
            return None

        assert cache.get_or_compute('k', compute, store_if=lambda v: v is not None) is None
        assert cache.get_or_compute('k', compute, store_if=lambda v: v is not None) is None
        assert len(calls) == 2
        assert 'k' not in cache

    def test_failed_computation_is_not_cached(self):
        cache = ContentCache('test')

        def boom():
            raise RuntimeError('store down')

        with pytest.raises(RuntimeError):
            cache.get_or_compute('k', boom)

        assert 'k' not in cache
        assert cache.get_or_compute('k', lambda: 'recovered') == 'recovered'

    def test_max_entries_stops_memoizing_new_keys(self):
        """A full cache still answers but keeps only the first keys"""
        cache = ContentCache('test', max_entries=2)
        cache.get_or_compute('a', lambda: 1)
        cache.get_or_compute('b', lambda: 2)

        assert cache.get_or_compute('c', lambda: 3) == 3
        assert 'c' not in cache
        assert len(cache) == 2
        # Existing keys keep their values
        assert cache.get_or_compute('a', lambda: 99) == 1


class TestContentCacheConcurrency:
    """Tests for single-flight behaviour under concurrent first access"""

    def test_concurrent_callers_share_one_computation(self):
        """Callers arriving while a key is computed wait for that result"""
        cache = ContentCache('test')
        entered = threading.Event()
        release = threading.Event()
        calls = []
        results = []

        def compute():
            calls.append(1)
            entered.set()
            release.wait(5)
            return 'value'

        def worker():
            results.append(cache.get_or_compute('k', compute))

        leader = threading.Thread(target=worker)
        leader.start()
        assert entered.wait(5)

        followers = [threading.Thread(target=worker) for _ in range(5)]
        for t in followers:
            t.start()
        release.set()
        for t in [leader] + followers:
            t.join(5)

        assert len(calls) == 1
        assert results == ['value'] * 6
        assert cache.get('k') == 'value'

    def test_waiters_see_the_leaders_error(self):
        """A failing computation fails every caller and leaves no entry"""
        cache = ContentCache('test')
        entered = threading.Event()
        release = threading.Event()
        errors = []

        def compute():
            entered.set()
            release.wait(5)
            raise ValueError('decode failure')

        def worker():
            try:
                cache.get_or_compute('k', compute)
            except ValueError as e:
                errors.append(e)

        leader = threading.Thread(target=worker)
        leader.start()
        assert entered.wait(5)
        followers = [threading.Thread(target=worker) for _ in range(3)]
        for t in followers:
            t.start()
        release.set()
        for t in [leader] + followers:
            t.join(5)

        assert len(errors) == 4
        assert 'k' not in cache

    def test_many_threads_converge_on_one_value(self):
        cache = ContentCache('test')
        barrier = threading.Barrier(8)
        results = []

        def worker(n):
            barrier.wait(5)
            results.append(cache.get_or_compute('shared', lambda: ('computed', n)))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)

        assert len(results) == 8
        assert all(r == cache.get('shared') for r in results)
